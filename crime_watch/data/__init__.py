from .time_window import plan, previous_month
from .police_client import PoliceApiClient
from .snapshot_fetcher import SnapshotFetcher, count_by_category

__all__ = [
    "plan",
    "previous_month",
    "PoliceApiClient",
    "SnapshotFetcher",
    "count_by_category",
]
