# eggtimer/core/summary.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .segment import SegmentTable


@dataclass(frozen=True, slots=True)
class DurationStats:
    """Aggregate durations (seconds) of the complete segments of one type."""
    type_name: str
    count: int
    total: float
    mean: float
    minimum: float
    maximum: float


def summarize(table: SegmentTable) -> dict[str, DurationStats]:
    """
    Per-type duration statistics.

    Only complete segments (start and finish observed) count; a type whose
    segments are all partial does not appear in the result.
    """
    stats: dict[str, DurationStats] = {}
    complete = table.complete()
    for type_name in complete.type_names():
        d = complete.by_type(type_name).durations()
        stats[type_name] = DurationStats(
            type_name=type_name,
            count=int(d.size),
            total=float(np.sum(d)),
            mean=float(np.mean(d)),
            minimum=float(np.min(d)),
            maximum=float(np.max(d)),
        )
    return stats
