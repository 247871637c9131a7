"""Baseline and deviation computations for monthly crime snapshots."""

from .baseline import (
    category_universe,
    window_frame,
    compute_figures,
    figures_to_dict,
    figures_from_dict,
)
from .deviation import detect, deviation_percent, to_alerts

__all__ = [
    'category_universe',
    'window_frame',
    'compute_figures',
    'figures_to_dict',
    'figures_from_dict',
    'detect',
    'deviation_percent',
    'to_alerts',
]
