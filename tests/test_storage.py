from datetime import datetime

import pytest

from crime_watch.storage import (
    CHECKPOINT_KEY,
    FIGURES_KEY,
    NO_CHECKPOINT,
    JsonFileCache,
    MemoryCache,
    UpdateGate,
    should_run,
)
from crime_watch.utils.exceptions import CacheReadError, CacheWriteError


class TestShouldRun:
    @pytest.mark.parametrize('upstream', [
        datetime(2024, 1, 1),
        datetime(2023, 12, 31, 23, 59),
        datetime(2020, 5, 1),
    ])
    def test_closed_when_not_newer(self, upstream):
        assert should_run(upstream, datetime(2024, 1, 1)) is False

    def test_open_when_newer(self):
        assert should_run(datetime(2024, 2, 1), datetime(2024, 1, 1)) is True

    def test_first_run_always_opens(self):
        assert should_run(datetime(1970, 1, 1), None) is True
        assert should_run(datetime(1970, 1, 1), NO_CHECKPOINT) is True


class TestUpdateGate:
    def test_missing_checkpoint_reads_as_minimum(self, memory_cache):
        assert UpdateGate(memory_cache).read_checkpoint() == NO_CHECKPOINT

    def test_round_trip(self, memory_cache):
        gate = UpdateGate(memory_cache)
        stamp = datetime(2024, 2, 1, 0, 0)
        gate.advance(stamp)
        assert gate.read_checkpoint() == stamp
        assert gate.should_run(stamp) is False
        assert gate.should_run(datetime(2024, 3, 1)) is True

    def test_round_trip_through_files(self, tmp_path):
        stamp = datetime(2024, 2, 1, 6, 30, 15)
        UpdateGate(JsonFileCache(str(tmp_path))).advance(stamp)
        assert UpdateGate(JsonFileCache(str(tmp_path))).read_checkpoint() == stamp

    def test_reads_timezone_aware_values_as_utc(self):
        cache = MemoryCache({CHECKPOINT_KEY: '2024-02-01T01:00:00+01:00'})
        assert UpdateGate(cache).read_checkpoint() == datetime(2024, 2, 1, 0, 0)

    def test_corrupt_checkpoint(self):
        cache = MemoryCache({CHECKPOINT_KEY: 'not a date'})
        with pytest.raises(CacheReadError):
            UpdateGate(cache).read_checkpoint()


class TestMemoryCache:
    def test_missing_key(self, memory_cache):
        assert memory_cache.read('nope') is None

    def test_values_are_copies(self, memory_cache):
        value = {'burglary': {'average': 1.0}}
        memory_cache.write(FIGURES_KEY, value)
        value['burglary']['average'] = 5.0
        assert memory_cache.read(FIGURES_KEY) == {'burglary': {'average': 1.0}}

    def test_unserialisable_value(self, memory_cache):
        with pytest.raises(CacheWriteError):
            memory_cache.write('x', object())


class TestJsonFileCache:
    def test_write_then_read(self, tmp_path):
        cache = JsonFileCache(str(tmp_path))
        cache.write(FIGURES_KEY, {'drugs': {'average': 2.5, 'deviation_percent': None}})
        assert cache.read(FIGURES_KEY) == {'drugs': {'average': 2.5, 'deviation_percent': None}}

    def test_key_maps_to_safe_filename(self, tmp_path):
        cache = JsonFileCache(str(tmp_path))
        path = cache.path_for(CHECKPOINT_KEY)
        assert path.parent == tmp_path
        assert ':' not in path.name

    def test_missing_key(self, tmp_path):
        assert JsonFileCache(str(tmp_path)).read('nope') is None

    def test_corrupt_file(self, tmp_path):
        cache = JsonFileCache(str(tmp_path))
        cache.path_for(FIGURES_KEY).write_text('{not json', encoding='utf-8')
        with pytest.raises(CacheReadError):
            cache.read(FIGURES_KEY)

    def test_failed_write_keeps_previous_value(self, tmp_path):
        cache = JsonFileCache(str(tmp_path))
        cache.write(CHECKPOINT_KEY, '2024-01-01T00:00:00')
        with pytest.raises(CacheWriteError):
            cache.write(CHECKPOINT_KEY, {'bad': object()})
        assert cache.read(CHECKPOINT_KEY) == '2024-01-01T00:00:00'
        assert not list(tmp_path.glob('*.tmp'))
