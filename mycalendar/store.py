"""
In-memory event storage for one calendar.

EventStore keeps events in insertion order and answers conflict queries.

Conflict policy:
- reject_conflicts=True  -> an overlapping insert raises ConflictDetected
  and leaves the store untouched
- reject_conflicts=False -> the event is inserted and the overlapping
  events are returned as a warning

Independent of the policy, two events with the same (name, start) key can
never coexist, so removal by identity is always unambiguous.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from mycalendar.conflicts import find_conflicts
from mycalendar.errors import ConflictDetected, DuplicateEvent, NotFound

if TYPE_CHECKING:
    from mycalendar.model import CalendarEvent

logger = logging.getLogger(__name__)


class EventStore:
    def __init__(self, events: Iterable[CalendarEvent] = (), reject_conflicts: bool = False) -> None:
        self.reject_conflicts = reject_conflicts
        self._events: list[CalendarEvent] = []
        for ev in events:
            self.add(ev)

    def __iter__(self) -> Iterator[CalendarEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event: object) -> bool:
        return event in self._events

    def find_conflicts(self, candidate: CalendarEvent) -> Iterator[CalendarEvent]:
        """
        Lazily yield stored events overlapping `candidate` (store state at call time).
        """
        return find_conflicts(candidate, self._events)

    def get(self, name: str, start: datetime) -> CalendarEvent:
        for ev in self._events:
            if ev.key == (name, start):
                return ev
        raise NotFound(f"No event named '{name}' starting at {start.isoformat()}", key=(name, start))

    def matching(self, name: str, since: Optional[datetime] = None) -> list[CalendarEvent]:
        """
        All events with exactly this name, optionally only those starting at/after `since`.
        """
        return [ev for ev in self._events if ev.name == name and (since is None or ev.start >= since)]

    def add(self, event: CalendarEvent, reject_conflicts: Optional[bool] = None) -> list[CalendarEvent]:
        """
        Insert one event. Returns the overlapping events (empty if none).
        """
        return self.add_all([event], reject_conflicts=reject_conflicts)

    def add_all(self, events: Iterable[CalendarEvent], reject_conflicts: Optional[bool] = None) -> list[CalendarEvent]:
        """
        Insert a batch of events, all or nothing.

        Each event is checked against the store and against the events
        before it in the batch.
        """
        batch = list(events)
        conflicts = self._check(batch, others=list(self._events), reject_conflicts=reject_conflicts)
        self._events.extend(batch)
        logger.debug("Added %d event(s), %d conflict(s)", len(batch), len(conflicts))
        return conflicts

    def remove(self, name: str, start: datetime) -> CalendarEvent:
        """
        Remove the event identified by (name, start). Raises NotFound otherwise.
        """
        ev = self.get(name, start)
        self._events.remove(ev)
        logger.debug("Removed event %r at %s", name, start)
        return ev

    def replace(
        self,
        pairs: Iterable[tuple[CalendarEvent, CalendarEvent]],
        reject_conflicts: Optional[bool] = None,
    ) -> list[CalendarEvent]:
        """
        Swap old events for new ones in place, all or nothing.

        Replaced events are excluded from the conflict and duplicate checks.
        """
        pairs = list(pairs)
        olds = [old for old, _ in pairs]
        for old in olds:
            if old not in self._events:
                raise NotFound(f"Event '{old.name}' is not in this calendar", key=old.key)

        others = [ev for ev in self._events if ev not in olds]
        conflicts = self._check([new for _, new in pairs], others=others, reject_conflicts=reject_conflicts)

        for old, new in pairs:
            self._events[self._events.index(old)] = new
        return conflicts

    def _check(
        self,
        batch: list[CalendarEvent],
        others: list[CalendarEvent],
        reject_conflicts: Optional[bool],
    ) -> list[CalendarEvent]:
        reject = self.reject_conflicts if reject_conflicts is None else reject_conflicts

        seen = list(others)
        conflicts: list[CalendarEvent] = []
        for ev in batch:
            if any(other.key == ev.key for other in seen):
                raise DuplicateEvent(
                    f"An event named '{ev.name}' already starts at {ev.start.isoformat()}", key=ev.key
                )
            found = list(find_conflicts(ev, seen))
            if found and reject:
                raise ConflictDetected(
                    f"'{ev.name}' overlaps {len(found)} existing event(s)", conflicts=found
                )
            for other in found:
                if other not in conflicts:
                    conflicts.append(other)
            seen.append(ev)
        return conflicts
