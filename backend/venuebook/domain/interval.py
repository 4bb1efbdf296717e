"""
Interval algebra for same-day booking windows.

Intervals are half-open ``[start, end)`` on a single calendar date: adjacent
intervals (one ends exactly when the other starts) do not overlap. A booking
cannot span midnight, so intervals on different dates never overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, List

from venuebook.core.exceptions import InvalidInterval


@dataclass(frozen=True, order=True)
class TimeInterval:
    """A dated ``[start, end)`` range; ordering is lexicographic on (date, start, end)."""

    date: date
    start: time
    end: time

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise InvalidInterval(self.start, self.end, on_date=self.date)

    @property
    def duration_minutes(self) -> int:
        return _minutes(self.end) - _minutes(self.start)

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)

    def contains(self, other: "TimeInterval") -> bool:
        """True when ``other`` lies entirely inside this interval."""
        return self.date == other.date and self.start <= other.start and other.end <= self.end


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def validate_interval(on_date: date, start: time, end: time) -> TimeInterval:
    """Build an interval or raise InvalidInterval for zero-length/inverted input."""
    return TimeInterval(on_date, start, end)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Half-open overlap: touching endpoints are not an overlap."""
    return a.date == b.date and a.start < b.end and b.start < a.end


def subtract(base: TimeInterval, cut: TimeInterval) -> List[TimeInterval]:
    """
    Remove ``cut`` from ``base``.

    Returns:
        [] when cut covers base, [base] when they do not overlap,
        one fragment for an edge overlap, two when cut is strictly interior.
    """
    if not overlaps(base, cut):
        return [base]

    fragments: List[TimeInterval] = []
    if base.start < cut.start:
        fragments.append(TimeInterval(base.date, base.start, cut.start))
    if cut.end < base.end:
        fragments.append(TimeInterval(base.date, cut.end, base.end))
    return fragments


def subtract_all(base: TimeInterval, cuts: Iterable[TimeInterval]) -> List[TimeInterval]:
    """Repeatedly subtract every cut from ``base``, keeping fragments ordered."""
    remaining = [base]
    for cut in cuts:
        if cut.date != base.date:
            continue
        next_remaining: List[TimeInterval] = []
        for fragment in remaining:
            next_remaining.extend(subtract(fragment, cut))
        remaining = next_remaining
        if not remaining:
            break
    return sorted(remaining)
