"""Value types passed between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class Snapshot:
    """One month's incident counts per category."""
    month: str
    counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Own a read-only copy so callers can't mutate it afterwards
        object.__setattr__(self, 'counts', MappingProxyType(dict(self.counts)))

    def count(self, category: str) -> int:
        return self.counts.get(category, 0)

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(self.counts)

    @property
    def total(self) -> int:
        return sum(self.counts.values())


@dataclass(frozen=True)
class CategoryFigure:
    average: float
    deviation_percent: Optional[float]

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {'average': self.average, 'deviation_percent': self.deviation_percent}


class Alert(NamedTuple):
    category: str
    deviation_percent: float


def freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))
