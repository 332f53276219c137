"""
Half-open interval primitives.

An ``Interval`` is ``[start, end)``: the start is included, the end is not.
The same functions work on integer minutes-of-day and on absolute
``DateTime`` values, since they only ever compare endpoints.

Malformed intervals (``start >= end``) are never rejected here. They are
treated as empty and silently dropped from every result.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List


@dataclass(frozen=True, order=True)
class Interval:
    """
    Represents an immutable half-open range ``[start, end)``.
    """
    start: Any
    end: Any

    @property
    def is_empty(self) -> bool:
        """An interval with no room between its endpoints."""
        return not self.start < self.end

    def length(self):
        """Return ``end - start`` (minutes or a timedelta)."""
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        """Strict overlap test; touching endpoints do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: "Interval") -> bool:
        """Check if ``other`` lies entirely within this interval."""
        return self.start <= other.start and other.end <= self.end

    def intersect(self, other: "Interval") -> "Interval | None":
        """
        Calculate the intersection of two intervals.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return Interval(start=max(self.start, other.start), end=min(self.end, other.end))

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


def overlaps(a: Interval, b: Interval) -> bool:
    """Module-level alias of ``Interval.overlaps``."""
    return a.overlaps(b)


def merge(intervals: Iterable[Interval]) -> List[Interval]:
    """
    Sort by start and coalesce overlapping or touching intervals.

    Example: [09:00-10:00, 10:00-11:00, 10:30-12:00] -> [09:00-12:00]
    """
    ranges = sorted(i for i in intervals if not i.is_empty)
    if not ranges:
        return []

    merged: List[Interval] = [ranges[0]]

    for current in ranges[1:]:
        last = merged[-1]

        # No gap between the two: extend the previous one
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = Interval(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


def subtract(free: Iterable[Interval], busy: Iterable[Interval]) -> List[Interval]:
    """
    Remove every busy interval from the free set.

    Example:
    Free: [09:00-17:00]
    Busy: [10:00-11:00, 14:00-15:00]
    Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
    """
    busy_ranges = merge(busy)
    result: List[Interval] = []

    for block in merge(free):
        current_start = block.start

        for blocker in busy_ranges:
            if blocker.end <= current_start:
                continue
            if blocker.start >= block.end:
                break

            if current_start < blocker.start:
                result.append(Interval(start=current_start, end=blocker.start))

            current_start = max(current_start, blocker.end)
            if current_start >= block.end:
                break

        if current_start < block.end:
            result.append(Interval(start=current_start, end=block.end))

    return result


def intersect(first: Iterable[Interval], second: Iterable[Interval]) -> List[Interval]:
    """
    Calculate intersection of two interval sets.

    Returns all overlapping periods between any interval of each set.
    """
    second_list = list(second)
    intersections: List[Interval] = []

    for range1 in first:
        for range2 in second_list:
            overlap = range1.intersect(range2)
            if overlap is not None and not overlap.is_empty:
                intersections.append(overlap)

    return merge(intersections)
