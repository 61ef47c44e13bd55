"""
Central data model.

- CalendarEvent: one immutable event (half-open interval [start, end))
- Calendar: a named calendar with an IANA timezone and its EventStore
- CalendarModel: all calendars of a session plus the operations the
  controller needs (create/edit/copy/query)

Editing never mutates an event. A new value is built with dataclasses.replace
and swapped into the store, so a failed edit leaves everything untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mycalendar.conflicts import conflicts_with, find_conflict_pairs
from mycalendar.errors import DuplicateEvent, InvalidInterval, NotFound, ValidationError
from mycalendar.store import EventStore

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59)

EDITABLE_PROPERTIES = ("name", "start", "end", "description", "location", "private")
CALENDAR_PROPERTIES = ("name", "timezone")


@dataclass(frozen=True)
class CalendarEvent:
    """
    One calendar event. Construction fails for blank names and for start >= end.
    """

    name: str
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    is_public: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Event name must not be empty", field="name", value=self.name)
        # Events hold naive wall-clock times in their calendar's timezone
        if self.start.tzinfo is not None or self.end.tzinfo is not None:
            raise ValidationError("Event times must not carry a UTC offset", field="start", value=self.start)
        if self.start >= self.end:
            raise InvalidInterval(self.start, self.end)

    @classmethod
    def all_day(cls, name: str, day: date, **kwargs) -> CalendarEvent:
        return cls(name, datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY), **kwargs)

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.name, self.start)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_all_day(self) -> bool:
        return self.start.time() == time.min and self.end.time() == END_OF_DAY and self.start.date() == self.end.date()

    def conflicts_with(self, other: CalendarEvent) -> bool:
        return conflicts_with(self, other)


def validate_timezone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Invalid timezone: {tz_name}", field="timezone", value=tz_name) from None


def convert_timezone(value: datetime, source_tz: str, target_tz: str) -> datetime:
    """
    Re-express a naive wall-clock time from one timezone in another (result stays naive).
    """
    if source_tz == target_tz:
        return value
    aware = value.replace(tzinfo=validate_timezone(source_tz))
    return aware.astimezone(validate_timezone(target_tz)).replace(tzinfo=None)


@dataclass
class Calendar:
    name: str
    timezone: str
    events: EventStore = field(default_factory=EventStore)


def _parse_bool(value: str, prop: str) -> bool:
    lowered = value.strip().lower()
    if lowered not in ("true", "false"):
        raise ValidationError(f"Expected 'true' or 'false' for {prop}, got {value!r}", field=prop, value=value)
    return lowered == "true"


def _parse_time_of_day(value: str, prop: str) -> time:
    """
    Accept 'HH:MM' or a full ISO date-time (only its time is used).
    """
    raw = value.strip()
    try:
        parsed = datetime.fromisoformat(raw).timetz()
    except ValueError:
        try:
            parsed = time.fromisoformat(raw)
        except ValueError:
            raise ValidationError(f"Invalid time for {prop}: {value!r}", field=prop, value=value) from None
    if parsed.tzinfo is not None:
        raise ValidationError(f"UTC offsets are not supported for {prop}: {value!r}", field=prop, value=value)
    return parsed


def _parse_datetime(value: str, prop: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid date-time for {prop}: {value!r}", field=prop, value=value) from None
    if parsed.tzinfo is not None:
        raise ValidationError(f"UTC offsets are not supported for {prop}: {value!r}", field=prop, value=value)
    return parsed


def _normalize_property(prop: str) -> str:
    p = prop.strip().lower()
    if p == "isprivate":
        p = "private"
    if p not in EDITABLE_PROPERTIES:
        raise ValidationError(f"Unsupported property for edit: {prop}", field="property", value=prop)
    return p


def _edited(event: CalendarEvent, prop: str, value: str, keep_dates: bool) -> CalendarEvent:
    """
    Build the edited copy of `event`. With keep_dates, start/end only change time-of-day.
    """
    if prop == "name":
        return replace(event, name=value)
    if prop == "description":
        return replace(event, description=value)
    if prop == "location":
        return replace(event, location=value)
    if prop == "private":
        return replace(event, is_public=not _parse_bool(value, prop))

    if keep_dates:
        anchor = event.start if prop == "start" else event.end
        new_value = datetime.combine(anchor.date(), _parse_time_of_day(value, prop))
    else:
        new_value = _parse_datetime(value, prop)
    return replace(event, **{prop: new_value})


class CalendarModel:
    """
    Holds every calendar of the session. Calendar names are case-insensitive.
    """

    def __init__(self, reject_conflicts: bool = True) -> None:
        self.reject_conflicts = reject_conflicts
        self._calendars: list[Calendar] = []

    # ------------------------------------------------------------------
    # Calendars
    # ------------------------------------------------------------------

    def calendar_names(self) -> list[str]:
        return [c.name for c in self._calendars]

    def has_calendar(self, name: str) -> bool:
        return any(c.name.lower() == name.lower() for c in self._calendars)

    def get_calendar(self, name: str) -> Calendar:
        for cal in self._calendars:
            if cal.name.lower() == name.lower():
                return cal
        raise NotFound(f"Calendar not found: {name}", key=name)

    def create_calendar(self, name: str, timezone: str) -> Calendar:
        if not name.strip():
            raise ValidationError("Calendar name must not be empty", field="name", value=name)
        validate_timezone(timezone)
        if self.has_calendar(name):
            raise DuplicateEvent(f"Calendar with name '{name}' already exists.", key=name)

        cal = Calendar(name=name, timezone=timezone, events=EventStore(reject_conflicts=self.reject_conflicts))
        self._calendars.append(cal)
        logger.info("Created calendar %r (%s)", name, timezone)
        return cal

    def edit_calendar(self, name: str, prop: str, value: str) -> Calendar:
        cal = self.get_calendar(name)
        p = prop.strip().lower()
        if p == "name":
            if not value.strip():
                raise ValidationError("Calendar name must not be empty", field="name", value=value)
            if value.lower() != cal.name.lower() and self.has_calendar(value):
                raise DuplicateEvent(f"Calendar with name '{value}' already exists.", key=value)
            cal.name = value
        elif p == "timezone":
            validate_timezone(value)
            # Event wall-clock times stay as they are
            cal.timezone = value
        else:
            raise ValidationError(
                f"Unsupported property for calendar edit: {prop} (allowed: {', '.join(CALENDAR_PROPERTIES)})",
                field="property",
                value=prop,
            )
        logger.info("Calendar %r: %s -> %r", name, p, value)
        return cal

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event(self, calendar: str, event: CalendarEvent, auto_decline: bool = False) -> list[CalendarEvent]:
        """
        Add one event. Returns advisory conflicts; raises ConflictDetected when rejecting.
        """
        store = self.get_calendar(calendar).events
        return store.add(event, reject_conflicts=True if auto_decline else None)

    def add_events(self, calendar: str, events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
        return self.get_calendar(calendar).events.add_all(events)

    def remove_event(self, calendar: str, name: str, start: datetime) -> CalendarEvent:
        return self.get_calendar(calendar).events.remove(name, start)

    def edit_event(
        self, calendar: str, prop: str, name: str, start: datetime, end: datetime, value: str
    ) -> tuple[CalendarEvent, list[CalendarEvent]]:
        """
        Edit the single event matching name, start and end exactly.

        Returns (edited event, advisory conflicts).
        """
        store = self.get_calendar(calendar).events
        p = _normalize_property(prop)
        matches = [ev for ev in store.matching(name) if ev.start == start and ev.end == end]
        if not matches:
            raise NotFound(f"No matching event found for editing: {name}", key=(name, start, end))

        event = matches[0]
        edited = _edited(event, p, value, keep_dates=False)
        conflicts = store.replace([(event, edited)])
        return edited, conflicts

    def edit_events(
        self, calendar: str, prop: str, name: str, since: Optional[datetime], value: str
    ) -> tuple[list[CalendarEvent], list[CalendarEvent]]:
        """
        Edit every event with this name starting at/after `since` (all if None).

        Returns (edited events, advisory conflicts).
        """
        store = self.get_calendar(calendar).events
        p = _normalize_property(prop)
        targets = store.matching(name, since)
        if not targets:
            raise NotFound(f"No matching event found for editing: {name}", key=name)

        pairs = [(ev, _edited(ev, p, value, keep_dates=True)) for ev in targets]
        conflicts = store.replace(pairs)
        return [new for _, new in pairs], conflicts

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def events_in_range(self, calendar: str, start: datetime, end: datetime) -> list[CalendarEvent]:
        """
        Events overlapping the closed window [start, end], sorted by start.
        """
        if end < start:
            raise ValidationError("The end date-time must not be before the start date-time.", field="end")
        store = self.get_calendar(calendar).events
        found = [ev for ev in store if ev.start <= end and ev.end > start]
        return sorted(found, key=lambda ev: ev.start)

    def events_at(self, calendar: str, at: datetime) -> list[CalendarEvent]:
        store = self.get_calendar(calendar).events
        return [ev for ev in store if ev.start <= at < ev.end]

    def is_busy(self, calendar: str, at: datetime) -> bool:
        return bool(self.events_at(calendar, at))

    def all_events(self, calendar: str) -> list[CalendarEvent]:
        return sorted(self.get_calendar(calendar).events, key=lambda ev: ev.start)

    def conflict_pairs(self, calendar: str) -> list[tuple[CalendarEvent, CalendarEvent]]:
        return find_conflict_pairs(self.all_events(calendar))

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    def copy_event(
        self, source: str, name: str, start: datetime, target: str, target_start: datetime
    ) -> tuple[CalendarEvent, list[CalendarEvent]]:
        """
        Copy one event to `target_start` (interpreted in the target calendar), keeping its duration.
        """
        original = self.get_calendar(source).events.get(name, start)
        target_store = self.get_calendar(target).events
        copy = replace(original, start=target_start, end=target_start + original.duration)
        return copy, target_store.add(copy)

    def copy_events(
        self, source: str, from_date: date, to_date: date, target: str, target_date: date
    ) -> tuple[list[CalendarEvent], list[CalendarEvent]]:
        """
        Copy every event starting within [from_date, to_date] to the target calendar.

        Day offsets relative to from_date are kept and times are converted
        from the source timezone to the target timezone.
        """
        if to_date < from_date:
            raise ValidationError("The end date must not be before the start date.", field="to_date")
        source_cal = self.get_calendar(source)
        target_cal = self.get_calendar(target)

        selected = sorted(
            (ev for ev in source_cal.events if from_date <= ev.start.date() <= to_date),
            key=lambda ev: ev.start,
        )
        if not selected:
            raise NotFound("No events to copy in the given date range.", key=(from_date, to_date))

        copies: list[CalendarEvent] = []
        for ev in selected:
            day = target_date + (ev.start.date() - from_date)
            new_start = convert_timezone(
                datetime.combine(day, ev.start.time()), source_cal.timezone, target_cal.timezone
            )
            copies.append(replace(ev, start=new_start, end=new_start + ev.duration))

        conflicts = target_cal.events.add_all(copies)
        logger.info("Copied %d event(s) from %r to %r", len(copies), source, target)
        return copies, conflicts
