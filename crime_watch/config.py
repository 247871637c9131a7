"""
Run configuration for the crime anomaly watcher.

Values come from the environment (optionally populated from a `.env` file via
python-dotenv); explicit overrides, e.g. from CLI flags, win over the
environment. Nothing here talks to the network.
"""

import math
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from crime_watch.utils.exceptions import ConfigError
from crime_watch.utils.logger_config import setup_logger

logger = setup_logger(__name__)

DEFAULT_API_URL = 'https://data.police.uk/api'
DEFAULT_CACHE_DIR = os.path.join('data', 'cache')
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 8
ZERO_BASELINE_POLICIES = ('alert', 'error')

ENV_KEYS = {
    'latitude': 'CRIME_WATCH_LAT',
    'longitude': 'CRIME_WATCH_LNG',
    'month_count': 'CRIME_WATCH_MONTHS',
    'threshold_percent': 'CRIME_WATCH_THRESHOLD',
    'api_base_url': 'CRIME_WATCH_API_URL',
    'cache_dir': 'CRIME_WATCH_CACHE_DIR',
    'request_timeout': 'CRIME_WATCH_TIMEOUT',
    'max_workers': 'CRIME_WATCH_MAX_WORKERS',
    'zero_baseline': 'CRIME_WATCH_ZERO_BASELINE',
}


@dataclass(frozen=True)
class RunConfig:
    """
    Parameters of a single pipeline run.

    Attributes:
        latitude (float): Latitude of the point the street-level query is centred on
        longitude (float): Longitude of the same point
        month_count (int): Number of months in the baseline window, most recent included
        threshold_percent (float): Deviation magnitude (in %) a category must exceed to alert
    """
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    month_count: Optional[int] = None
    threshold_percent: Optional[float] = None

    def validate(self) -> 'RunConfig':
        """
        Check every field is resolved and sane.

        Returns:
            RunConfig: self, so calls can be chained

        Raises:
            ConfigError: If a field is missing or out of range
        """
        missing = [name for name in ('latitude', 'longitude', 'month_count', 'threshold_percent')
                   if getattr(self, name) is None]
        if missing:
            raise ConfigError(f'Unresolved run config fields: {", ".join(missing)}')

        if isinstance(self.month_count, bool) or not isinstance(self.month_count, int) or self.month_count <= 0:
            raise ConfigError(f'month_count must be a positive integer, got {self.month_count!r}')

        for name in ('latitude', 'longitude', 'threshold_percent'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigError(f'{name} must be a finite number, got {value!r}')

        if not -90 <= self.latitude <= 90:
            raise ConfigError(f'latitude out of range: {self.latitude}')
        if not -180 <= self.longitude <= 180:
            raise ConfigError(f'longitude out of range: {self.longitude}')

        return self


@dataclass(frozen=True)
class AppSettings:
    """Settings for the collaborators around the pipeline (HTTP, cache, detector policy)."""
    api_base_url: str = DEFAULT_API_URL
    cache_dir: str = DEFAULT_CACHE_DIR
    request_timeout: float = DEFAULT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    zero_baseline: str = 'alert'

    def validate(self) -> 'AppSettings':
        if self.request_timeout <= 0:
            raise ConfigError(f'request_timeout must be positive, got {self.request_timeout}')
        if self.max_workers <= 0:
            raise ConfigError(f'max_workers must be positive, got {self.max_workers}')
        if self.zero_baseline not in ZERO_BASELINE_POLICIES:
            raise ConfigError(
                f'zero_baseline must be one of {ZERO_BASELINE_POLICIES}, got {self.zero_baseline!r}'
            )
        return self


def _parse(environ: Mapping[str, str], field: str, cast):
    key = ENV_KEYS[field]
    raw = environ.get(key)
    if raw is None or raw.strip() == '':
        return None
    try:
        return cast(raw.strip())
    except ValueError:
        logger.error(f'Invalid value for {key}: {raw!r}')
        raise ConfigError(f'Invalid value for {key}: {raw!r}')


def load_run_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> RunConfig:
    """
    Build a validated RunConfig from the environment plus explicit overrides.

    Args:
        environ: Mapping to read from (Default = os.environ after loading .env)
        **overrides: Field values that take precedence; None values are ignored

    Returns:
        RunConfig: Fully resolved config

    Raises:
        ConfigError: If a field is missing, unparseable or out of range
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    config = RunConfig(
        latitude=_parse(environ, 'latitude', float),
        longitude=_parse(environ, 'longitude', float),
        month_count=_parse(environ, 'month_count', int),
        threshold_percent=_parse(environ, 'threshold_percent', float),
    )
    explicit = {k: v for k, v in overrides.items() if v is not None}
    if explicit:
        config = replace(config, **explicit)
    return config.validate()


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> AppSettings:
    """Build validated AppSettings from the environment plus explicit overrides."""
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    values = {
        'api_base_url': _parse(environ, 'api_base_url', str),
        'cache_dir': _parse(environ, 'cache_dir', str),
        'request_timeout': _parse(environ, 'request_timeout', float),
        'max_workers': _parse(environ, 'max_workers', int),
        'zero_baseline': _parse(environ, 'zero_baseline', lambda s: s.lower()),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    settings = AppSettings(**{k: v for k, v in values.items() if v is not None})
    return settings.validate()
