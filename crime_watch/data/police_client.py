"""
data.police.uk API client.

Thin wrapper over a `requests.Session` exposing the two endpoints the watcher
needs: `crime-last-updated` and `crimes-street/all-crime`. Every failure is
reported as a TransportError; retry and rate limiting are left to whoever
schedules the runs.

Note:
    API docs: https://data.police.uk/docs/
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional

import requests

from crime_watch.config import DEFAULT_API_URL, DEFAULT_TIMEOUT
from crime_watch.utils.exceptions import TransportError
from crime_watch.utils.logger_config import setup_logger
from crime_watch.utils.timestamps import parse_timestamp

logger = setup_logger(__name__)

USER_AGENT = 'crime-watch/0.1'


class PoliceApiClient:
    """
    HTTP fetch capability for the police.uk API.

    Attributes:
        base_url (str): Root of the API, without trailing slash
        timeout (float): Per-request timeout in seconds

    Example:
        >>> client = PoliceApiClient()
        >>> client.last_updated()
        datetime.datetime(2024, 2, 1, 0, 0)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        ) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT, 'Accept': 'application/json'})

    def get(
            self,
            path: str,
            params: Optional[Dict[str, Any]] = None,
            transform: Optional[Callable[[Any], Any]] = None,
            ) -> Any:
        """
        GET a JSON endpoint.

        Args:
            path (str): Endpoint path relative to base_url
            params (dict): Query string parameters
            transform (callable): Applied to the decoded payload before returning

        Returns:
            Any: Decoded (and optionally transformed) payload

        Raises:
            TransportError: Network failure, non-2xx status or invalid JSON
        """
        url = f'{self.base_url}/{path.lstrip("/")}'
        logger.debug(f'Requesting: {url} {params or ""}')

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f'Network error for {url}: {str(e)}')
            raise TransportError(f'Network error for {url}: {str(e)}') from e

        if not 200 <= response.status_code < 300:
            logger.error(f'Request failed with status {response.status_code}: {response.text[:200]}')
            raise TransportError(f'{url} returned HTTP {response.status_code}')

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f'Malformed JSON from {url}: {str(e)}')
            raise TransportError(f'Malformed JSON from {url}') from e

        if transform is None:
            return payload
        return transform(payload)

    def last_updated(self) -> datetime:
        """
        Date the upstream street-level dataset was last refreshed.

        Raises:
            TransportError: If the request fails or the payload has no usable date
        """
        payload = self.get('crime-last-updated')
        if not isinstance(payload, dict) or 'date' not in payload:
            raise TransportError(f'crime-last-updated payload has no date: {payload!r}')
        try:
            return parse_timestamp(payload['date'])
        except ValueError as e:
            raise TransportError(f'Unparseable crime-last-updated date: {payload["date"]!r}') from e

    def street_crimes(
            self,
            latitude: float,
            longitude: float,
            month: str,
            transform: Optional[Callable[[Any], Any]] = None,
            ) -> Any:
        """All street-level crimes within a mile of (latitude, longitude) for `month` (YYYY-MM)."""
        params = {'lat': latitude, 'lng': longitude, 'date': month}
        return self.get('crimes-street/all-crime', params=params, transform=transform)
