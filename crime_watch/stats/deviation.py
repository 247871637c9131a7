"""Threshold detection of categories whose latest month departs from the baseline."""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional

from crime_watch.models import Alert, CategoryFigure, Snapshot, freeze
from crime_watch.utils.exceptions import DegenerateBaselineError
from crime_watch.utils.logger_config import setup_logger

logger = setup_logger(__name__)

ZERO_BASELINE_ALERT = 'alert'
ZERO_BASELINE_ERROR = 'error'


def deviation_percent(current: float, average: float) -> Optional[float]:
    """Signed % difference of `current` from `average`; None when the average is 0."""
    if average == 0:
        return None
    return (current - average) / average * 100


def detect(
    most_recent: Snapshot,
    figures: Mapping[str, CategoryFigure],
    threshold_percent: float,
    zero_baseline: str = ZERO_BASELINE_ALERT,
) -> Mapping[str, float]:
    """
    Select the categories whose deviation magnitude exceeds the threshold.

    The comparison is strict and uses absolute values on both sides, so -25 and
    25 behave the same. A category with a zero average and a positive current
    count is an unbounded increase: it alerts with +inf, or raises under the
    "error" policy.

    Args:
        most_recent: Snapshot for the latest month
        figures: Baseline figures for the window the snapshot belongs to
        threshold_percent: Deviation limit in percent
        zero_baseline: "alert" or "error"

    Returns:
        Read-only AlertSet mapping category -> signed deviation percent

    Raises:
        DegenerateBaselineError: Zero-average category with a positive count under "error"
    """
    limit = abs(threshold_percent)
    alerts: Dict[str, float] = {}

    for category, figure in figures.items():
        current = most_recent.count(category)
        deviation = deviation_percent(current, figure.average)

        if deviation is None:
            if current <= 0:
                continue
            if zero_baseline == ZERO_BASELINE_ERROR:
                logger.error(f'{category}: zero baseline with {current} current incidents')
                raise DegenerateBaselineError(
                    f'{category} has a zero baseline average but {current} incidents in {most_recent.month}'
                )
            logger.debug(f'{category}: zero baseline, flagging unbounded increase')
            alerts[category] = math.inf
            continue

        if abs(deviation) > limit:
            alerts[category] = deviation

    return freeze(alerts)


def to_alerts(alert_set: Mapping[str, float]) -> List[Alert]:
    """AlertSet as a list of Alert tuples, largest magnitude first."""
    ordered = sorted(alert_set.items(), key=lambda item: (-abs(item[1]), item[0]))
    return [Alert(category, deviation) for category, deviation in ordered]
