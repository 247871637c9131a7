"""
Update gate: decides whether upstream has published anything newer than the
last dataset we processed, and moves the checkpoint forward after a run.
"""

from datetime import datetime
from typing import Optional

from crime_watch.storage.cache import CHECKPOINT_KEY, KeyValueCache
from crime_watch.utils.exceptions import CacheReadError
from crime_watch.utils.logger_config import setup_logger
from crime_watch.utils.timestamps import format_timestamp, parse_timestamp

logger = setup_logger(__name__)

# Stands in for a checkpoint that was never written
NO_CHECKPOINT = datetime.min


def should_run(upstream_last_updated: datetime, checkpoint: Optional[datetime]) -> bool:
    """True iff upstream is strictly newer than the checkpoint (None = first run)."""
    if checkpoint is None:
        checkpoint = NO_CHECKPOINT
    return upstream_last_updated > checkpoint


class UpdateGate:
    """
    Checkpoint persistence around `should_run`.

    The checkpoint must only be advanced once a run has fully succeeded;
    the pipeline calls `advance` as its final step.
    """

    def __init__(self, cache: KeyValueCache, key: str = CHECKPOINT_KEY) -> None:
        self.cache = cache
        self.key = key

    def read_checkpoint(self) -> datetime:
        """
        Last processed upstream timestamp, or NO_CHECKPOINT on the first run.

        Raises:
            CacheReadError: If the cache fails or holds something that isn't a timestamp
        """
        raw = self.cache.read(self.key)
        if raw is None:
            logger.info('No checkpoint found, treating this as the first run')
            return NO_CHECKPOINT
        try:
            return parse_timestamp(raw)
        except (TypeError, ValueError) as e:
            logger.error(f'Corrupt checkpoint under {self.key}: {raw!r}')
            raise CacheReadError(f'Corrupt checkpoint under {self.key}: {raw!r}') from e

    def should_run(self, upstream_last_updated: datetime, checkpoint: Optional[datetime] = None) -> bool:
        if checkpoint is None:
            checkpoint = self.read_checkpoint()
        decision = should_run(upstream_last_updated, checkpoint)
        if decision:
            logger.info(f'New upstream data: {upstream_last_updated} > checkpoint {checkpoint}')
        else:
            logger.info(f'No new upstream data since {checkpoint} (upstream {upstream_last_updated})')
        return decision

    def advance(self, upstream_last_updated: datetime) -> None:
        self.cache.write(self.key, format_timestamp(upstream_last_updated))
        logger.info(f'Checkpoint advanced to {upstream_last_updated}')
