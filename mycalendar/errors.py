"""Error types raised by the calendar model, parser and input modes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from mycalendar.model import CalendarEvent


@dataclass
class CalendarError(Exception):
    message: str
    code: str = "CALENDAR_ERROR"
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


class ValidationError(CalendarError):
    def __init__(self, message: str, field: str | None = None, value: Any | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details={"field": field, "value": value})
        self.field = field
        self.value = value


class InvalidInterval(ValidationError):
    def __init__(self, start: datetime, end: datetime) -> None:
        super().__init__(f"Event must end after it starts ({start.isoformat()} >= {end.isoformat()})", field="end")
        self.code = "INVALID_INTERVAL"
        self.details = {"start": start, "end": end}
        self.start = start
        self.end = end


class ConflictDetected(CalendarError):
    def __init__(self, message: str, conflicts: Iterable[CalendarEvent] = ()) -> None:
        conflicts = tuple(conflicts)
        super().__init__(message, code="CONFLICT", details={"conflicts": conflicts})
        self.conflicts = conflicts


class NotFound(CalendarError):
    def __init__(self, message: str, key: Any | None = None) -> None:
        super().__init__(message, code="NOT_FOUND", details={"key": key})
        self.key = key


class DuplicateEvent(CalendarError):
    def __init__(self, message: str, key: Any | None = None) -> None:
        super().__init__(message, code="DUPLICATE", details={"key": key})
        self.key = key


class CommandError(CalendarError):
    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message, code="COMMAND_ERROR", details={"line": line})
        self.line = line


class HeadlessScriptError(CalendarError):
    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, code="HEADLESS_SCRIPT", details={"path": path})
        self.path = path


class CalendarFileError(CalendarError):
    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, code="FILE_ERROR", details={"path": path})
        self.path = path


def format_error_for_user(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return f"Validation Error: {error.message}"
    if isinstance(error, ConflictDetected):
        return f"Conflict: {error.message}"
    if isinstance(error, NotFound):
        return f"Not Found: {error.message}"
    if isinstance(error, DuplicateEvent):
        return f"Already Exists: {error.message}"
    if isinstance(error, CommandError):
        return f"Invalid Command: {error.message}"
    if isinstance(error, CalendarFileError):
        return f"File Error: {error.message}"
    if isinstance(error, CalendarError):
        return f"Error: {error.message}"
    return f"Error: {str(error)}"
