"""
Monthly snapshot fetcher.

Pulls one month of street-level crimes per key in parallel and reduces each
month to incident counts per category. The window is all-or-nothing: a single
failed month fails the whole fetch.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Sequence

import pandas as pd

from crime_watch.config import DEFAULT_MAX_WORKERS
from crime_watch.data.police_client import PoliceApiClient
from crime_watch.models import Snapshot
from crime_watch.utils.exceptions import TransportError
from crime_watch.utils.logger_config import setup_logger

logger = setup_logger(__name__)


def count_by_category(records: Any) -> Dict[str, int]:
    """
    Reduce a raw crimes-street payload to incident counts per category.

    Args:
        records: Decoded JSON payload; expected to be a list of crime records

    Returns:
        Dict[str, int]: category -> number of records

    Raises:
        TransportError: If the payload is not a list of records with a `category` field
    """
    if not isinstance(records, list):
        raise TransportError(f'Expected a list of crime records, got {type(records).__name__}')
    if not records:
        return {}
    if not all(isinstance(record, dict) for record in records):
        raise TransportError('Crime records must be JSON objects')

    frame = pd.DataFrame.from_records(records)
    if 'category' not in frame.columns:
        raise TransportError('Crime records have no category field')

    missing = int(frame['category'].isna().sum())
    if missing:
        raise TransportError(f'{missing} of {len(frame)} crime records have no category')

    counts = frame['category'].astype(str).value_counts()
    return {category: int(n) for category, n in counts.items()}


class SnapshotFetcher:
    """
    Parallel fetch of a window of monthly snapshots.

    Attributes:
        client (PoliceApiClient): HTTP capability used for every month
        max_workers (int): Upper bound on concurrent requests

    Example:
        >>> fetcher = SnapshotFetcher(PoliceApiClient())
        >>> fetcher.fetch_all(51.5074, -0.1278, ['2024-01', '2023-12'])
    """

    def __init__(self, client: PoliceApiClient, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self.client = client
        self.max_workers = max_workers

    def fetch_month(self, latitude: float, longitude: float, month: str) -> Snapshot:
        logger.info(f'police-uk: fetching data for date={month}')
        counts = self.client.street_crimes(latitude, longitude, month, transform=count_by_category)
        logger.debug(f'{month}: {sum(counts.values())} crimes over {len(counts)} categories')
        return Snapshot(month=month, counts=counts)

    def fetch_all(
            self,
            latitude: float,
            longitude: float,
            keys: Sequence[str],
            ) -> List[Snapshot]:
        """
        Fetch every month in `keys` concurrently.

        Args:
            latitude (float): Query latitude
            longitude (float): Query longitude
            keys (Sequence[str]): `YYYY-MM` keys, most recent first

        Returns:
            List[Snapshot]: One snapshot per key, in the order of `keys`

        Raises:
            TransportError: If any single month fails; no snapshots are returned
        """
        if not keys:
            return []

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(keys)))
        future_to_key = {
            executor.submit(self.fetch_month, latitude, longitude, key): key
            for key in keys
        }
        by_key = {}
        try:
            # Completion order, so the first failed month surfaces without
            # waiting on slower siblings
            for future in as_completed(future_to_key):
                by_key[future_to_key[future]] = future.result()
        except TransportError as e:
            logger.error(f'Window fetch aborted on {future_to_key[future]}: {str(e)}')
            raise
        finally:
            # Pending months are cancelled; in-flight requests finish in the background
            executor.shutdown(wait=False, cancel_futures=True)

        snapshots = [by_key[key] for key in keys]
        logger.info(f'Fetched {len(snapshots)} monthly snapshots ({keys[-1]} .. {keys[0]})')
        return snapshots
