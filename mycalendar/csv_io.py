"""
Google Calendar CSV import/export.

File layout (one header row, one event per row):

    Subject,Start Date,Start Time,End Date,End Time,All Day Event,Description,Location,Private

- dates are MM/DD/YYYY, times are hh:mm AM/PM (hh:mm:ss AM/PM when seconds are set)
- booleans are True/False
- all-day rows map to 00:00:00 - 23:59:59
"""

from __future__ import annotations

import csv
import logging
from dataclasses import replace
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable, Optional

from mycalendar.errors import CalendarFileError, ValidationError
from mycalendar.model import END_OF_DAY, CalendarEvent, convert_timezone

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "All Day Event",
    "Description",
    "Location",
    "Private",
]

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%I:%M %p"
TIME_FORMAT_SECONDS = "%I:%M:%S %p"


def _format_time(value: datetime) -> str:
    # hh:mm AM/PM, or hh:mm:ss AM/PM when the time has seconds
    return value.strftime(TIME_FORMAT_SECONDS if value.second else TIME_FORMAT)


def _event_row(ev: CalendarEvent) -> list[str]:
    return [
        ev.name,
        ev.start.strftime(DATE_FORMAT),
        _format_time(ev.start),
        ev.end.strftime(DATE_FORMAT),
        _format_time(ev.end),
        "True" if ev.is_all_day else "False",
        ev.description,
        ev.location,
        "False" if ev.is_public else "True",
    ]


def export_events_to_csv(events: Iterable[CalendarEvent], out_path: str | Path) -> int:
    """
    Export events to a CSV file (overwrites). Returns number of exported events.
    """
    out = Path(out_path)
    count = 0
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for ev in events:
                writer.writerow(_event_row(ev))
                count += 1
    except OSError as e:
        raise CalendarFileError(f"Could not write {out}: {e}", path=str(out)) from e

    logger.info("Exported %d event(s) to %s", count, out)
    return count


def _parse_date(value: str, line_no: int) -> date:
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"Line {line_no}: invalid date {value!r} (expected MM/DD/YYYY)", value=value) from None


def _parse_time(value: str, line_no: int) -> time:
    raw = value.strip().upper()
    for fmt in (TIME_FORMAT, TIME_FORMAT_SECONDS):
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Line {line_no}: invalid time {value!r} (expected hh:mm[:ss] AM/PM)", value=value)


def _is_true(value: str) -> bool:
    return value.strip().lower() == "true"


def _row_to_event(row: list[str], line_no: int) -> CalendarEvent:
    subject, start_date, start_time, end_date, end_time, all_day = (x.strip() for x in row[:6])
    description = row[6].strip() if len(row) > 6 else ""
    location = row[7].strip() if len(row) > 7 else ""
    private = _is_true(row[8]) if len(row) > 8 else False

    if _is_true(all_day):
        start = datetime.combine(_parse_date(start_date, line_no), time.min)
        end = datetime.combine(_parse_date(end_date, line_no), END_OF_DAY)
    else:
        start = datetime.combine(_parse_date(start_date, line_no), _parse_time(start_time, line_no))
        end = datetime.combine(_parse_date(end_date, line_no), _parse_time(end_time, line_no))

    return CalendarEvent(
        name=subject,
        start=start,
        end=end,
        description=description,
        location=location,
        is_public=not private,
    )


def import_events_from_csv(
    path: str | Path,
    source_tz: Optional[str] = None,
    target_tz: Optional[str] = None,
) -> list[CalendarEvent]:
    """
    Read events from a Google Calendar CSV file.

    Rows with fewer than 8 fields are skipped. If both timezones are given,
    timed events are converted from source_tz to target_tz.
    """
    src = Path(path)
    events: list[CalendarEvent] = []
    try:
        with src.open("r", encoding="utf-8", newline="") as f:
            reader = csv.reader(f)
            next(reader, None)  # header
            for line_no, row in enumerate(reader, start=2):
                if len(row) < 8:
                    logger.debug("Skipping malformed CSV line %d in %s", line_no, src)
                    continue
                ev = _row_to_event(row, line_no)
                if source_tz and target_tz and not ev.is_all_day:
                    start = convert_timezone(ev.start, source_tz, target_tz)
                    ev = replace(ev, start=start, end=start + ev.duration)
                events.append(ev)
    except (OSError, UnicodeDecodeError) as e:
        raise CalendarFileError(f"Could not read {src}: {e}", path=str(src)) from e

    logger.info("Read %d event(s) from %s", len(events), src)
    return events
