"""
Controller: turns command lines into model calls and view output.

Flow per line:
    text -> parse_command() -> command object -> handler -> view

Calendar errors (bad syntax, conflicts, missing events, ...) are shown to
the user and the session continues. Anything else is a bug and propagates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from mycalendar.config import Config
from mycalendar.csv_io import export_events_to_csv, import_events_from_csv
from mycalendar.errors import CalendarError, CommandError, ValidationError, format_error_for_user
from mycalendar.export_ics import export_events_to_ics
from mycalendar.model import CalendarEvent, CalendarModel
from mycalendar.modes import is_exit
from mycalendar.parse import (
    CALENDAR_COMMANDS,
    Command,
    CopyEvent,
    CopyEvents,
    CreateCalendar,
    CreateEvent,
    EditCalendar,
    EditEvent,
    EditEvents,
    ExportCalendar,
    ImportCalendar,
    PrintEvents,
    RemoveEvent,
    ShowConflicts,
    ShowStatus,
    UseCalendar,
    parse_command,
)
from mycalendar.view import View, event_line

logger = logging.getLogger(__name__)

NO_CALENDAR_MESSAGE = "No calendar in use. Run: use calendar --name <name>"


class CalendarController:
    def __init__(self, model: CalendarModel, view: View, config: Optional[Config] = None) -> None:
        self.model = model
        self.view = view
        self.config = config or Config()
        self.current_calendar: Optional[str] = None
        self._handlers: dict[type, Callable] = {
            CreateCalendar: self._create_calendar,
            UseCalendar: self._use_calendar,
            EditCalendar: self._edit_calendar,
            CreateEvent: self._create_event,
            EditEvent: self._edit_event,
            EditEvents: self._edit_events,
            RemoveEvent: self._remove_event,
            PrintEvents: self._print_events,
            ShowStatus: self._show_status,
            ShowConflicts: self._show_conflicts,
            CopyEvent: self._copy_event,
            CopyEvents: self._copy_events,
            ExportCalendar: self._export,
            ImportCalendar: self._import,
        }

    def start(self) -> None:
        """
        Create (if needed) and select the default calendar.
        """
        name = self.config.default_calendar
        if not self.model.has_calendar(name):
            self.model.create_calendar(name, self.config.default_timezone)
        self.current_calendar = self.model.get_calendar(name).name
        logger.debug("Using default calendar %r", self.current_calendar)

    def run(self, commands: Iterable[str]) -> int:
        """
        Execute lines until 'exit' or the end of input. Returns the number of executed lines.
        """
        if self.current_calendar is None:
            self.start()
        self.view.welcome()

        count = 0
        for line in commands:
            if not self.execute(line):
                break
            count += 1
        return count

    def execute(self, line: str) -> bool:
        """
        Execute one line. Returns False when the line is 'exit'.
        """
        if is_exit(line):
            return False
        try:
            command = parse_command(line)
            if command is None:
                return True
            self.dispatch(command)
        except CalendarError as e:
            logger.debug("Command failed: %r (%s)", line, e.code)
            self.view.display_error(format_error_for_user(e))
        return True

    def dispatch(self, command: Command) -> None:
        if not isinstance(command, CALENDAR_COMMANDS) and self.current_calendar is None:
            raise CommandError(NO_CALENDAR_MESSAGE)
        handler = self._handlers[type(command)]
        handler(command)

    @property
    def _calendar(self) -> str:
        if self.current_calendar is None:
            raise CommandError(NO_CALENDAR_MESSAGE)
        return self.current_calendar

    def _warn_conflicts(self, conflicts: list[CalendarEvent]) -> None:
        if not conflicts:
            return
        self.view.display_warning(f"overlaps {len(conflicts)} existing event(s):")
        for ev in conflicts:
            self.view.display(f"  - {event_line(ev)}")

    # ------------------------------------------------------------------
    # Calendar commands
    # ------------------------------------------------------------------

    def _create_calendar(self, cmd: CreateCalendar) -> None:
        self.model.create_calendar(cmd.name, cmd.timezone)
        self.view.display("Calendar created successfully.")

    def _use_calendar(self, cmd: UseCalendar) -> None:
        cal = self.model.get_calendar(cmd.name)
        self.current_calendar = cal.name
        self.view.display(f"Using calendar: {cal.name}")

    def _edit_calendar(self, cmd: EditCalendar) -> None:
        old_name = self.model.get_calendar(cmd.name).name
        cal = self.model.edit_calendar(cmd.name, cmd.prop, cmd.value)
        if self.current_calendar == old_name:
            self.current_calendar = cal.name
        self.view.display("Calendar updated successfully.")

    # ------------------------------------------------------------------
    # Event commands
    # ------------------------------------------------------------------

    def _create_event(self, cmd: CreateEvent) -> None:
        event = CalendarEvent(
            name=cmd.name,
            start=cmd.start,
            end=cmd.end,
            description=cmd.description,
            location=cmd.location,
            is_public=cmd.is_public,
        )
        conflicts = self.model.add_event(self._calendar, event, auto_decline=cmd.auto_decline)
        self.view.display("Event created successfully.")
        self._warn_conflicts(conflicts)

    def _edit_event(self, cmd: EditEvent) -> None:
        _, conflicts = self.model.edit_event(self._calendar, cmd.prop, cmd.name, cmd.start, cmd.end, cmd.value)
        self.view.display("Event edited successfully.")
        self._warn_conflicts(conflicts)

    def _edit_events(self, cmd: EditEvents) -> None:
        edited, conflicts = self.model.edit_events(self._calendar, cmd.prop, cmd.name, cmd.since, cmd.value)
        self.view.display(f"Events updated successfully ({len(edited)} edited).")
        self._warn_conflicts(conflicts)

    def _remove_event(self, cmd: RemoveEvent) -> None:
        removed = self.model.remove_event(self._calendar, cmd.name, cmd.start)
        self.view.display(f"Event removed: {event_line(removed)}")

    def _print_events(self, cmd: PrintEvents) -> None:
        events = self.model.events_in_range(self._calendar, cmd.start, cmd.end)
        self.view.display_events(events, title=f"Events in {self._calendar}")

    def _show_status(self, cmd: ShowStatus) -> None:
        self.view.display("Busy" if self.model.is_busy(self._calendar, cmd.at) else "Available")

    def _show_conflicts(self, cmd: ShowConflicts) -> None:
        self.view.display_conflicts(self.model.conflict_pairs(self._calendar))

    def _copy_event(self, cmd: CopyEvent) -> None:
        _, conflicts = self.model.copy_event(self._calendar, cmd.name, cmd.start, cmd.target, cmd.target_start)
        self.view.display("Event copied successfully.")
        self._warn_conflicts(conflicts)

    def _copy_events(self, cmd: CopyEvents) -> None:
        copies, conflicts = self.model.copy_events(
            self._calendar, cmd.from_date, cmd.to_date, cmd.target, cmd.target_date
        )
        self.view.display(f"Events copied successfully ({len(copies)} copied).")
        self._warn_conflicts(conflicts)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def _export(self, cmd: ExportCalendar) -> None:
        events = self.model.all_events(self._calendar)
        suffix = Path(cmd.path).suffix.lower()
        if suffix == ".csv":
            n = export_events_to_csv(events, cmd.path)
        elif suffix == ".ics":
            n = export_events_to_ics(events, cmd.path, calendar_name=self._calendar)
        else:
            raise ValidationError(f"Unsupported export format: {cmd.path} (use .csv or .ics)", field="path")
        self.view.display(f"Exported {n} events to: {Path(cmd.path).resolve()}")

    def _import(self, cmd: ImportCalendar) -> None:
        if Path(cmd.path).suffix.lower() != ".csv":
            raise ValidationError(f"Unsupported import format: {cmd.path} (use .csv)", field="path")
        target_tz = self.model.get_calendar(self._calendar).timezone
        events = import_events_from_csv(cmd.path, source_tz=cmd.timezone, target_tz=target_tz)
        if not events:
            self.view.display("No events found to import.")
            return
        conflicts = self.model.add_events(self._calendar, events)
        self.view.display(f"Imported {len(events)} events into calendar '{self._calendar}'.")
        self._warn_conflicts(conflicts)
