import importlib.util
from pathlib import Path

import pandas as pd
import pytest

from crime_watch.storage.cache import CHECKPOINT_KEY, FIGURES_KEY, JsonFileCache

SCRIPT = Path(__file__).resolve().parents[1] / 'scripts' / 'figures_report.py'

spec = importlib.util.spec_from_file_location('figures_report', SCRIPT)
figures_report = importlib.util.module_from_spec(spec)
spec.loader.exec_module(figures_report)


@pytest.fixture
def cache_dir(tmp_path):
    cache = JsonFileCache(str(tmp_path / 'cache'))
    cache.write(CHECKPOINT_KEY, '2024-01-01T00:00:00')
    cache.write(FIGURES_KEY, {
        'burglary': {'average': 9.0, 'deviation_percent': 11.1},
        'drugs': {'average': 1.0, 'deviation_percent': -100.0},
        'arson': {'average': 0.0, 'deviation_percent': None},
    })
    return tmp_path / 'cache'


class TestFiguresReport:
    def test_writes_csv_sorted_by_magnitude(self, cache_dir, tmp_path):
        out = tmp_path / 'report.csv'
        assert figures_report.main(['--cache-dir', str(cache_dir), '--out', str(out)]) == 0

        df = pd.read_csv(out)
        assert list(df['category']) == ['drugs', 'burglary', 'arson']
        assert df.loc[0, 'label'] == 'Drugs'
        assert df.loc[1, 'group'] == 'Property'
        assert pd.isna(df.loc[2, 'deviation_percent'])
        assert (df['checkpoint'] == '2024-01-01T00:00:00').all()

    def test_no_figures_yet(self, tmp_path):
        out = tmp_path / 'report.csv'
        assert figures_report.main(['--cache-dir', str(tmp_path / 'empty'), '--out', str(out)]) == 2
        assert not out.exists()
