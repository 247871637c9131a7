"""
Incremental crime anomaly pipeline.

One call to `CrimeAnomalyPipeline.run` performs a single pass:

    check update -> plan months -> fetch window -> baseline -> detect -> persist

and ends in DONE or FAILED. The checkpoint is written last, so a run that
fails anywhere leaves it untouched and the next run retries the same window.
Callers must not run two passes against the same cache at once.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Mapping, Optional

from crime_watch.alerts import AlertSink
from crime_watch.config import DEFAULT_MAX_WORKERS, RunConfig
from crime_watch.data.police_client import PoliceApiClient
from crime_watch.data.snapshot_fetcher import SnapshotFetcher
from crime_watch.data.time_window import plan
from crime_watch.models import CategoryFigure
from crime_watch.stats.baseline import compute_figures, figures_to_dict
from crime_watch.stats.deviation import ZERO_BASELINE_ALERT, detect, to_alerts
from crime_watch.storage.cache import FIGURES_KEY, KeyValueCache
from crime_watch.storage.checkpoint import UpdateGate
from crime_watch.utils.logger_config import setup_logger

logger = setup_logger(__name__)


class RunState(Enum):
    IDLE = 'idle'
    CHECKING_UPDATE = 'checking_update'
    FETCHING = 'fetching'
    AGGREGATING = 'aggregating'
    DETECTING = 'detecting'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class RunResult:
    """What a single run saw and produced."""
    state: RunState = RunState.IDLE
    upstream_last_updated: Optional[datetime] = None
    checkpoint: Optional[datetime] = None
    keys: List[str] = field(default_factory=list)
    figures: Mapping[str, CategoryFigure] = field(default_factory=dict)
    alerts: Mapping[str, float] = field(default_factory=dict)

    @property
    def skipped(self) -> bool:
        """True when the run finished without processing anything."""
        return self.state is RunState.DONE and not self.keys


class CrimeAnomalyPipeline:
    """
    Orchestrates one run of the crime anomaly watcher.

    Design:
        - Ordered, single-pass steps; every collaborator is injected.
        - Only this class holds state across steps; the stats functions are pure.
        - Any exception moves the run to FAILED and is re-raised unchanged.

    Public API:
        - run(config): executes a pass and returns its RunResult.

    Example:
        >>> pipeline = CrimeAnomalyPipeline(PoliceApiClient(), JsonFileCache('data/cache'))
        >>> result = pipeline.run(RunConfig(51.5074, -0.1278, 6, 30.0))
        >>> dict(result.alerts)
        {'shoplifting': 42.5}
    """

    def __init__(
        self,
        client: PoliceApiClient,
        cache: KeyValueCache,
        fetcher: Optional[SnapshotFetcher] = None,
        sink: Optional[AlertSink] = None,
        zero_baseline: str = ZERO_BASELINE_ALERT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.client = client
        self.cache = cache
        self.fetcher = fetcher or SnapshotFetcher(client, max_workers=max_workers)
        self.sink = sink
        self.zero_baseline = zero_baseline
        self.gate = UpdateGate(cache)

        self.state = RunState.IDLE
        self.history: List[RunState] = [RunState.IDLE]
        self.last_result: Optional[RunResult] = None

    def _transition(self, result: RunResult, state: RunState) -> None:
        logger.debug(f'{self.state.value} -> {state.value}')
        self.state = state
        result.state = state
        self.history.append(state)

    def run(self, config: RunConfig) -> RunResult:
        """
        Execute one pass.

        Args:
            config (RunConfig): Location, window length and threshold for this run

        Returns:
            RunResult: Final state DONE, with empty alerts if nothing new was published

        Raises:
            CrimeWatchError: Whatever a step raised; the run ends in FAILED and
                the checkpoint is not modified
        """
        self.state = RunState.IDLE
        self.history = [RunState.IDLE]
        result = RunResult()
        self.last_result = result

        try:
            self._transition(result, RunState.CHECKING_UPDATE)
            config.validate()

            upstream = self.client.last_updated()
            checkpoint = self.gate.read_checkpoint()
            result.upstream_last_updated = upstream
            result.checkpoint = checkpoint

            if not self.gate.should_run(upstream, checkpoint):
                self._transition(result, RunState.DONE)
                return result

            keys = plan(upstream, config.month_count)
            if not keys:
                logger.warning('Empty month plan, nothing to fetch')
                self._transition(result, RunState.DONE)
                return result
            result.keys = keys

            self._transition(result, RunState.FETCHING)
            window = self.fetcher.fetch_all(config.latitude, config.longitude, keys)

            self._transition(result, RunState.AGGREGATING)
            figures = compute_figures(window)
            result.figures = figures
            logger.info(f'Baseline over {len(window)} months covers {len(figures)} categories')

            self._transition(result, RunState.DETECTING)
            alerts = detect(window[0], figures, config.threshold_percent, self.zero_baseline)
            result.alerts = alerts
            logger.info(f'{len(alerts)} categories beyond +/-{abs(config.threshold_percent)}%')

            self.cache.write(FIGURES_KEY, figures_to_dict(figures))
            if self.sink is not None:
                self.sink.send(to_alerts(alerts))
            # Must stay the final side effect of a successful run
            self.gate.advance(upstream)

            self._transition(result, RunState.DONE)
            return result

        except Exception as e:
            failed_in = self.state
            self._transition(result, RunState.FAILED)
            logger.error(f'Run failed while {failed_in.value}: {str(e)}')
            raise
