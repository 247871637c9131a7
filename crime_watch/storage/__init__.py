from .cache import KeyValueCache, JsonFileCache, MemoryCache, CHECKPOINT_KEY, FIGURES_KEY
from .checkpoint import UpdateGate, should_run, NO_CHECKPOINT

__all__ = [
    "KeyValueCache",
    "JsonFileCache",
    "MemoryCache",
    "CHECKPOINT_KEY",
    "FIGURES_KEY",
    "UpdateGate",
    "should_run",
    "NO_CHECKPOINT",
]
