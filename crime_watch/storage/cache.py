"""
Key-value cache used to persist the checkpoint and the diagnostic figures.

Values must be JSON-serialisable. `read` returns None for a key that was
never written.
"""

import json
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from crime_watch.config import DEFAULT_CACHE_DIR
from crime_watch.utils.exceptions import CacheReadError, CacheWriteError
from crime_watch.utils.logger_config import setup_logger

logger = setup_logger(__name__)

CHECKPOINT_KEY = 'crime_watch:last_update'
FIGURES_KEY = 'crime_watch:figures'


class KeyValueCache(ABC):
    """Cache capability the pipeline persists its state through."""

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """Store `value` under `key`, replacing any previous value."""


class MemoryCache(KeyValueCache):
    """Process-local cache; values are round-tripped through JSON like the file cache."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._store: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.write(key, value)

    def read(self, key: str) -> Optional[Any]:
        raw = self._store.get(key)
        return None if raw is None else json.loads(raw)

    def write(self, key: str, value: Any) -> None:
        try:
            self._store[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheWriteError(f'Value for {key} is not JSON-serialisable: {str(e)}') from e

    def keys(self):
        return list(self._store)


class JsonFileCache(KeyValueCache):
    """
    One JSON file per key under a directory.

    Writes go to a temp file in the same directory and are then renamed over
    the target, so a crash mid-write leaves the previous value intact.

    Attributes:
        directory (Path): Where the JSON files live
    """

    def __init__(self, directory: str = DEFAULT_CACHE_DIR) -> None:
        self.directory = Path(directory)
        try:
            os.makedirs(self.directory, exist_ok=True)
            logger.debug(f'Cache directory ready: {self.directory}')
        except OSError as e:
            logger.error(f'Failed to create cache directory {self.directory}. {str(e)}')
            raise CacheWriteError(f'Failed to create cache directory {self.directory}. {str(e)}') from e

    def path_for(self, key: str) -> Path:
        safe = re.sub(r'[^A-Za-z0-9_.-]', '_', key)
        return self.directory / f'{safe}.json'

    def read(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f'Failed to read cache entry {key} from {path}: {str(e)}')
            raise CacheReadError(f'Failed to read cache entry {key}: {str(e)}') from e

    def write(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=self.directory, suffix='.tmp', delete=False
            ) as f:
                tmp_name = f.name
                json.dump(value, f, indent=2, sort_keys=True)
            os.replace(tmp_name, path)
            logger.debug(f'Wrote cache entry {key} to {path}')
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(f'Failed to write cache entry {key} to {path}: {str(e)}')
            raise CacheWriteError(f'Failed to write cache entry {key}: {str(e)}') from e
