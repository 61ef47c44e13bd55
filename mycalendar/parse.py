"""
Command parsing (text line -> command object).

Every command line starts with an action and a subject ("create event",
"print events", ...). The remaining tokens are parsed by one small function
per command into a frozen dataclass; the controller dispatches on its type.

Rules:
- tokens are separated by whitespace, "double quotes" group a token
- keywords and flags are case-insensitive, values keep their case
- date-times are ISO (2025-03-01T09:30), dates are ISO (2025-03-01)
- recurring events ("repeats ...") are not supported
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Optional, Union

from mycalendar.errors import CommandError
from mycalendar.model import END_OF_DAY


# ---------------------------------------------------------------------------
# Command objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateCalendar:
    name: str
    timezone: str


@dataclass(frozen=True)
class UseCalendar:
    name: str


@dataclass(frozen=True)
class EditCalendar:
    name: str
    prop: str
    value: str


@dataclass(frozen=True)
class CreateEvent:
    name: str
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    is_public: bool = True
    auto_decline: bool = False


@dataclass(frozen=True)
class EditEvent:
    prop: str
    name: str
    start: datetime
    end: datetime
    value: str


@dataclass(frozen=True)
class EditEvents:
    prop: str
    name: str
    since: Optional[datetime]
    value: str


@dataclass(frozen=True)
class RemoveEvent:
    name: str
    start: datetime


@dataclass(frozen=True)
class PrintEvents:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class ShowStatus:
    at: datetime


@dataclass(frozen=True)
class ShowConflicts:
    pass


@dataclass(frozen=True)
class CopyEvent:
    name: str
    start: datetime
    target: str
    target_start: datetime


@dataclass(frozen=True)
class CopyEvents:
    from_date: date
    to_date: date
    target: str
    target_date: date


@dataclass(frozen=True)
class ExportCalendar:
    path: str


@dataclass(frozen=True)
class ImportCalendar:
    path: str
    timezone: Optional[str] = None


Command = Union[
    CreateCalendar,
    UseCalendar,
    EditCalendar,
    CreateEvent,
    EditEvent,
    EditEvents,
    RemoveEvent,
    PrintEvents,
    ShowStatus,
    ShowConflicts,
    CopyEvent,
    CopyEvents,
    ExportCalendar,
    ImportCalendar,
]

# Commands that work without a calendar in use
CALENDAR_COMMANDS = (CreateCalendar, UseCalendar, EditCalendar)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')


def tokenize(line: str) -> list[str]:
    """
    Split a command line into tokens. Quoted parts become one token (quotes removed).
    """
    return [bare or quoted for quoted, bare in _TOKEN_RE.findall(line)]


def parse_datetime(value: str, what: str = "date-time") -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise CommandError(f"Invalid {what}: {value!r} (expected YYYY-MM-DDTHH:MM)") from None
    # Times are wall-clock times of the calendar in use
    if parsed.tzinfo is not None:
        raise CommandError(f"Invalid {what}: {value!r} (UTC offsets are not supported, use local time)")
    return parsed


def parse_date(value: str, what: str = "date") -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise CommandError(f"Invalid {what}: {value!r} (expected YYYY-MM-DD)") from None


class _Tokens:
    """
    Cursor over the argument tokens of one command.
    """

    def __init__(self, tokens: list[str]) -> None:
        self.tokens = tokens
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self) -> str:
        return "" if self.at_end() else self.tokens[self.pos].lower()

    def take(self, what: str) -> str:
        if self.at_end():
            raise CommandError(f"Missing {what}")
        value = self.tokens[self.pos]
        self.pos += 1
        return value

    def expect(self, keyword: str, after: str = "") -> None:
        context = f" after {after}" if after else ""
        if self.at_end():
            raise CommandError(f"Expected '{keyword}'{context}")
        if self.tokens[self.pos].lower() != keyword:
            raise CommandError(f"Expected '{keyword}'{context}, got {self.tokens[self.pos]!r}")
        self.pos += 1

    def accept(self, keyword: str) -> bool:
        if self.peek() == keyword:
            self.pos += 1
            return True
        return False

    def finish(self) -> None:
        if not self.at_end():
            raise CommandError(f"Unrecognized extra arguments: {' '.join(self.tokens[self.pos:])}")


# ---------------------------------------------------------------------------
# Per-command parsers
# ---------------------------------------------------------------------------


def _parse_create_calendar(t: _Tokens) -> CreateCalendar:
    t.expect("--name")
    name = t.take("calendar name")
    t.expect("--timezone", after="calendar name")
    tz = t.take("timezone")
    t.finish()
    return CreateCalendar(name=name, timezone=tz)


def _parse_use_calendar(t: _Tokens) -> UseCalendar:
    t.expect("--name")
    name = t.take("calendar name")
    t.finish()
    return UseCalendar(name=name)


def _parse_edit_calendar(t: _Tokens) -> EditCalendar:
    t.expect("--name")
    name = t.take("calendar name")
    t.expect("--property", after="calendar name")
    prop = t.take("property name")
    value = t.take("new property value")
    t.finish()
    return EditCalendar(name=name, prop=prop, value=value)


def _parse_event_options(t: _Tokens) -> dict:
    options: dict = {}
    while not t.at_end():
        flag = t.take("option")
        key = flag.lower()
        if key == "--description" or key == "--location":
            field_name = key[2:]
            if field_name in options:
                raise CommandError(f"Duplicate {key} flag")
            options[field_name] = t.take(f"value for {key}")
        elif key == "--private":
            if "is_public" in options:
                raise CommandError("Duplicate --private flag")
            options["is_public"] = False
        else:
            raise CommandError(f"Unrecognized extra argument: {flag}")
    return options


def _parse_create_event(t: _Tokens) -> CreateEvent:
    auto_decline = t.accept("--autodecline")
    name = t.take("event name")

    if t.accept("from"):
        start = parse_datetime(t.take("start date-time after 'from'"), "start date-time")
        t.expect("to", after="start date-time")
        end = parse_datetime(t.take("end date-time after 'to'"), "end date-time")
    elif t.accept("on"):
        day = parse_date(t.take("date after 'on'"))
        start = datetime.combine(day, time.min)
        end = datetime.combine(day, END_OF_DAY)
    else:
        raise CommandError("Expected 'from' or 'on' after event name")

    if t.peek() == "repeats":
        raise CommandError("Recurring events are not supported")

    options = _parse_event_options(t)
    return CreateEvent(name=name, start=start, end=end, auto_decline=auto_decline, **options)


def _parse_edit_event(t: _Tokens) -> EditEvent:
    prop = t.take("property name")
    name = t.take("event name")
    t.expect("from", after="event name")
    start = parse_datetime(t.take("start date-time"), "start date-time")
    t.expect("to", after="start date-time")
    end = parse_datetime(t.take("end date-time"), "end date-time")
    t.expect("with", after="end date-time")
    value = t.take("new property value after 'with'")
    t.finish()
    return EditEvent(prop=prop, name=name, start=start, end=end, value=value)


def _parse_edit_events(t: _Tokens) -> EditEvents:
    prop = t.take("property name")
    name = t.take("event name")
    since: Optional[datetime] = None
    if t.accept("from"):
        since = parse_datetime(t.take("date-time after 'from'"))
        t.expect("with", after="date-time")
    value = t.take("new property value")
    t.finish()
    return EditEvents(prop=prop, name=name, since=since, value=value)


def _parse_remove_event(t: _Tokens) -> RemoveEvent:
    name = t.take("event name")
    t.expect("on", after="event name")
    start = parse_datetime(t.take("start date-time"), "start date-time")
    t.finish()
    return RemoveEvent(name=name, start=start)


def _parse_print_events(t: _Tokens) -> PrintEvents:
    if t.accept("on"):
        day = parse_date(t.take("date"))
        t.finish()
        return PrintEvents(start=datetime.combine(day, time.min), end=datetime.combine(day, END_OF_DAY))
    if t.accept("from"):
        start = parse_datetime(t.take("start date-time"), "start date-time")
        t.expect("to", after="start date-time")
        end = parse_datetime(t.take("end date-time"), "end date-time")
        t.finish()
        return PrintEvents(start=start, end=end)
    raise CommandError("Expected 'print events on <date>' or 'print events from <date-time> to <date-time>'")


def _parse_show_status(t: _Tokens) -> ShowStatus:
    t.expect("on")
    at = parse_datetime(t.take("date-time"))
    t.finish()
    return ShowStatus(at=at)


def _parse_show_conflicts(t: _Tokens) -> ShowConflicts:
    t.finish()
    return ShowConflicts()


def _parse_copy_event(t: _Tokens) -> CopyEvent:
    name = t.take("event name")
    t.expect("on", after="event name")
    start = parse_datetime(t.take("source date-time"), "source date-time")
    t.expect("--target", after="source date-time")
    target = t.take("target calendar name")
    t.expect("to", after="target calendar name")
    target_start = parse_datetime(t.take("target date-time"), "target date-time")
    t.finish()
    return CopyEvent(name=name, start=start, target=target, target_start=target_start)


def _parse_copy_events(t: _Tokens) -> CopyEvents:
    if t.accept("on"):
        from_date = parse_date(t.take("source date"), "source date")
        to_date = from_date
    elif t.accept("between"):
        from_date = parse_date(t.take("start date"), "start date")
        t.expect("and", after="start date")
        to_date = parse_date(t.take("end date"), "end date")
    else:
        raise CommandError("Expected 'on' or 'between' after 'copy events'")
    t.expect("--target", after="source dates")
    target = t.take("target calendar name")
    t.expect("to", after="target calendar name")
    target_date = parse_date(t.take("target date"), "target date")
    t.finish()
    return CopyEvents(from_date=from_date, to_date=to_date, target=target, target_date=target_date)


def _parse_export(t: _Tokens) -> ExportCalendar:
    path = t.take("filename for export")
    t.finish()
    return ExportCalendar(path=path)


def _parse_import(t: _Tokens) -> ImportCalendar:
    path = t.take("filename for import")
    tz: Optional[str] = None
    if t.accept("--timezone"):
        tz = t.take("timezone")
    t.finish()
    return ImportCalendar(path=path, timezone=tz)


_PARSERS: dict[tuple[str, str], Callable[[_Tokens], Command]] = {
    ("create", "calendar"): _parse_create_calendar,
    ("use", "calendar"): _parse_use_calendar,
    ("edit", "calendar"): _parse_edit_calendar,
    ("create", "event"): _parse_create_event,
    ("edit", "event"): _parse_edit_event,
    ("edit", "events"): _parse_edit_events,
    ("remove", "event"): _parse_remove_event,
    ("print", "events"): _parse_print_events,
    ("show", "status"): _parse_show_status,
    ("show", "conflicts"): _parse_show_conflicts,
    ("copy", "event"): _parse_copy_event,
    ("copy", "events"): _parse_copy_events,
    ("export", "cal"): _parse_export,
    ("import", "cal"): _parse_import,
}


def parse_command(line: str) -> Optional[Command]:
    """
    Parse one command line. Returns None for blank lines.

    Raises CommandError for unknown or malformed commands.
    """
    tokens = tokenize(line)
    if not tokens:
        return None

    action = tokens[0].lower()
    subject = tokens[1].lower() if len(tokens) > 1 else ""
    parser = _PARSERS.get((action, subject))
    if parser is None:
        raise CommandError(f"Unknown command: {' '.join(tokens[:2])}", line=line)

    try:
        return parser(_Tokens(tokens[2:]))
    except CommandError as e:
        e.line = line
        e.details = {"line": line}
        raise
