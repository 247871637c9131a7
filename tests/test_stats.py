import math

import pytest

from crime_watch.models import CategoryFigure, Snapshot
from crime_watch.stats import (
    category_universe,
    compute_figures,
    detect,
    deviation_percent,
    figures_from_dict,
    figures_to_dict,
    to_alerts,
    window_frame,
)
from crime_watch.utils.exceptions import DegenerateBaselineError


@pytest.fixture
def window():
    # most recent first
    return [
        Snapshot('2024-01', {'A': 10, 'B': 2}),
        Snapshot('2023-12', {'A': 8}),
        Snapshot('2023-11', {'A': 9, 'B': 1}),
    ]


class TestSnapshot:
    def test_absent_category_counts_zero(self):
        snap = Snapshot('2024-01', {'burglary': 3})
        assert snap.count('burglary') == 3
        assert snap.count('drugs') == 0

    def test_counts_are_read_only(self):
        source = {'burglary': 3}
        snap = Snapshot('2024-01', source)
        source['burglary'] = 99
        assert snap.count('burglary') == 3
        with pytest.raises(TypeError):
            snap.counts['burglary'] = 5


class TestBaseline:
    def test_category_universe_is_union(self, window):
        assert category_universe(window) == ('A', 'B')

    def test_window_frame_fills_missing_with_zero(self, window):
        frame = window_frame(window)
        assert list(frame.index) == ['2024-01', '2023-12', '2023-11']
        assert frame.loc['2023-12', 'B'] == 0
        assert frame['A'].sum() == 27

    def test_averages(self, window):
        figures = compute_figures(window)
        assert figures['A'].average == 9
        assert figures['B'].average == 1

    def test_deviation_uses_most_recent_month(self, window):
        figures = compute_figures(window)
        assert figures['A'].deviation_percent == pytest.approx(100 * (10 - 9) / 9)
        assert figures['B'].deviation_percent == pytest.approx(100.0)

    def test_rare_category_averaged_over_full_window(self):
        window = [Snapshot('2024-01', {}), Snapshot('2023-12', {}), Snapshot('2023-11', {'arson': 3})]
        figures = compute_figures(window)
        assert figures['arson'].average == 1
        assert figures['arson'].deviation_percent == pytest.approx(-100.0)

    def test_zero_average_has_no_deviation(self):
        window = [Snapshot('2024-01', {'drugs': 0}), Snapshot('2023-12', {'drugs': 0})]
        figures = compute_figures(window)
        assert figures['drugs'].average == 0
        assert figures['drugs'].deviation_percent is None

    def test_empty_window_fails_loudly(self):
        with pytest.raises(ValueError):
            compute_figures([])

    def test_input_snapshots_untouched(self, window):
        compute_figures(window)
        assert dict(window[1].counts) == {'A': 8}

    def test_figures_dict_round_trip(self, window):
        figures = compute_figures(window)
        assert dict(figures_from_dict(figures_to_dict(figures))) == dict(figures)


class TestDeviation:
    def test_deviation_percent(self):
        assert deviation_percent(18, 9) == 100.0
        assert deviation_percent(0, 4) == -100.0
        assert deviation_percent(5, 0) is None

    def test_threshold_is_strict(self):
        figures = {'A': CategoryFigure(average=9.0, deviation_percent=100.0)}
        latest = Snapshot('2024-01', {'A': 18})
        assert dict(detect(latest, figures, 100)) == {}
        assert dict(detect(latest, figures, 99.9)) == {'A': 100.0}

    def test_negative_threshold_behaves_like_positive(self):
        figures = {'A': CategoryFigure(average=9.0, deviation_percent=100.0)}
        latest = Snapshot('2024-01', {'A': 18})
        assert dict(detect(latest, figures, -99.9)) == dict(detect(latest, figures, 99.9))
        assert dict(detect(latest, figures, -100)) == {}

    def test_drops_are_signed(self):
        figures = {'burglary': CategoryFigure(average=10.0, deviation_percent=-80.0)}
        latest = Snapshot('2024-01', {'burglary': 2})
        assert dict(detect(latest, figures, 50)) == {'burglary': pytest.approx(-80.0)}

    def test_category_missing_from_latest_month(self):
        figures = {'robbery': CategoryFigure(average=3.0, deviation_percent=-100.0)}
        latest = Snapshot('2024-01', {})
        assert dict(detect(latest, figures, 90)) == {'robbery': -100.0}

    def test_zero_baseline_alerts_with_infinity(self):
        figures = {'drugs': CategoryFigure(average=0.0, deviation_percent=None)}
        latest = Snapshot('2024-01', {'drugs': 4})
        alerts = detect(latest, figures, 10)
        assert math.isinf(alerts['drugs']) and alerts['drugs'] > 0

    def test_zero_baseline_and_zero_count_is_quiet(self):
        figures = {'drugs': CategoryFigure(average=0.0, deviation_percent=None)}
        assert dict(detect(Snapshot('2024-01', {}), figures, 10)) == {}

    def test_zero_baseline_error_policy(self):
        figures = {'drugs': CategoryFigure(average=0.0, deviation_percent=None)}
        with pytest.raises(DegenerateBaselineError):
            detect(Snapshot('2024-01', {'drugs': 1}), figures, 10, zero_baseline='error')

    def test_end_to_end_window(self, window):
        alerts = detect(window[0], compute_figures(window), 50)
        assert dict(alerts) == {'B': pytest.approx(100.0)}

    def test_to_alerts_orders_by_magnitude(self):
        alerts = to_alerts({'a': 20.0, 'b': -75.0, 'c': math.inf})
        assert [a.category for a in alerts] == ['c', 'b', 'a']
        assert alerts[1].deviation_percent == -75.0
