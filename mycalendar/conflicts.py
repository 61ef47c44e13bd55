"""
Conflict detection.

Events are half-open intervals [start, end). Overlap rule:
    start < other_end AND other_start < end

Touching endpoints (end == other start) is NOT a conflict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator

if TYPE_CHECKING:
    from mycalendar.model import CalendarEvent


def _overlaps(a_start, a_end, b_start, b_end) -> bool:
    return a_start < b_end and b_start < a_end


def conflicts_with(candidate: CalendarEvent, existing: CalendarEvent) -> bool:
    """
    True if the two events overlap in time. Symmetric, no side effects.
    """
    return _overlaps(candidate.start, candidate.end, existing.start, existing.end)


def find_conflicts(candidate: CalendarEvent, events: Iterable[CalendarEvent]) -> Iterator[CalendarEvent]:
    """
    Lazily yield every event in `events` that overlaps `candidate`, in iteration order.

    The collection is copied when this function is called, so later changes
    to it are not seen by the returned iterator.
    """
    snapshot = tuple(events)
    return (ev for ev in snapshot if conflicts_with(candidate, ev))


def find_conflict_pairs(events: Iterable[CalendarEvent]) -> list[tuple[CalendarEvent, CalendarEvent]]:
    """
    Find overlapping event pairs (A,B), each pair appears once (i<j).
    """
    ordered = list(events)
    pairs: list[tuple[CalendarEvent, CalendarEvent]] = []

    # O(n^2) is fine for a personal calendar
    for i in range(len(ordered)):
        a = ordered[i]
        for j in range(i + 1, len(ordered)):
            b = ordered[j]
            if conflicts_with(a, b):
                pairs.append((a, b))

    return pairs
