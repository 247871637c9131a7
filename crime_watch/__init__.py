"""Crime anomaly watcher for the data.police.uk street-level crime API."""

from .config import RunConfig, AppSettings, load_run_config, load_settings
from .pipeline import CrimeAnomalyPipeline, RunResult, RunState

__version__ = "0.1.0"

__all__ = [
    "RunConfig",
    "AppSettings",
    "load_run_config",
    "load_settings",
    "CrimeAnomalyPipeline",
    "RunResult",
    "RunState",
]
