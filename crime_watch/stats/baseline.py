"""Rolling per-category baseline over a window of monthly snapshots."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from crime_watch.models import CategoryFigure, Snapshot, freeze


def category_universe(window: Sequence[Snapshot]) -> Tuple[str, ...]:
    """Sorted union of the categories seen in any snapshot of the window."""
    seen = set()
    for snapshot in window:
        seen.update(snapshot.categories)
    return tuple(sorted(seen))


def window_frame(window: Sequence[Snapshot], categories: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Months x categories count matrix; a category missing from a month counts as 0."""
    if categories is None:
        categories = category_universe(window)
    frame = pd.DataFrame(
        [dict(snapshot.counts) for snapshot in window],
        index=[snapshot.month for snapshot in window],
        columns=list(categories),
    )
    return frame.fillna(0).astype('int64')


def compute_figures(window: Sequence[Snapshot]) -> Mapping[str, CategoryFigure]:
    """
    Average each category over the whole window and measure the most recent month against it.

    Every category is averaged over len(window) months, including months where
    it was not reported at all.

    Args:
        window: Snapshots ordered most recent first

    Returns:
        Read-only mapping category -> CategoryFigure. deviation_percent is None
        where the average is zero.

    Raises:
        ValueError: If the window is empty
    """
    if len(window) == 0:
        raise ValueError('compute_figures needs at least one snapshot')

    frame = window_frame(window)
    averages = (frame.sum(axis=0) / len(window)).to_numpy(dtype='float64')
    current = frame.iloc[0].to_numpy(dtype='float64')

    with np.errstate(divide='ignore', invalid='ignore'):
        deviations = (current - averages) / averages * 100

    figures: Dict[str, CategoryFigure] = {}
    for category, average, deviation in zip(frame.columns, averages, deviations):
        figures[category] = CategoryFigure(
            average=float(average),
            deviation_percent=None if average == 0 else float(deviation),
        )
    return freeze(figures)


def figures_to_dict(figures: Mapping[str, CategoryFigure]) -> Dict[str, Dict[str, Optional[float]]]:
    """JSON-ready form of the figures, for the diagnostics cache entry."""
    return {category: figure.to_dict() for category, figure in figures.items()}


def figures_from_dict(raw: Mapping[str, Mapping[str, Optional[float]]]) -> Mapping[str, CategoryFigure]:
    return freeze({
        category: CategoryFigure(
            average=float(values['average']),
            deviation_percent=None if values.get('deviation_percent') is None else float(values['deviation_percent']),
        )
        for category, values in raw.items()
    })
