"""
Shared fixtures for the crime_watch test suite.

Everything runs without network access: the police API is replaced by
FakePoliceClient and the cache by MemoryCache.
"""

import threading
from datetime import datetime

import pytest

from crime_watch.storage.cache import MemoryCache
from crime_watch.utils.exceptions import TransportError


def crime_records(**counts):
    """Build a crimes-street style payload, e.g. crime_records(burglary=2)."""
    records = []
    for category, n in counts.items():
        slug = category.replace('_', '-')
        for _ in range(n):
            records.append({
                'category': slug,
                'location_type': 'Force',
                'month': None,
                'id': len(records),
            })
    return records


class FakePoliceClient:
    """Stands in for PoliceApiClient; payloads are keyed by YYYY-MM month."""

    def __init__(self, last_updated=datetime(2024, 1, 1), payloads=None, failing=()):
        self.last_updated_value = last_updated
        self.payloads = payloads or {}
        self.failing = set(failing)
        self.calls = []
        self.last_updated_calls = 0
        self._lock = threading.Lock()

    def last_updated(self):
        self.last_updated_calls += 1
        if isinstance(self.last_updated_value, Exception):
            raise self.last_updated_value
        return self.last_updated_value

    def street_crimes(self, latitude, longitude, month, transform=None):
        with self._lock:
            self.calls.append((latitude, longitude, month))
        if month in self.failing:
            raise TransportError(f'crimes-street/all-crime returned HTTP 503 for {month}')
        payload = self.payloads.get(month, [])
        return transform(payload) if transform else payload


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def three_month_payloads():
    # most recent first: 2024-01, 2023-12, 2023-11
    return {
        '2024-01': crime_records(burglary=10, drugs=2),
        '2023-12': crime_records(burglary=8),
        '2023-11': crime_records(burglary=9, drugs=1),
    }


@pytest.fixture
def fake_client(three_month_payloads):
    return FakePoliceClient(last_updated=datetime(2024, 1, 1), payloads=three_month_payloads)
