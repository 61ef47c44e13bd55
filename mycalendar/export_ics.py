"""
iCalendar (.ics) export.

We convert a calendar's events into a file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from mycalendar.errors import CalendarFileError
from mycalendar.model import CalendarEvent

logger = logging.getLogger(__name__)


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _dt_local(value: datetime) -> str:
    """
    Format a naive datetime as ICS local datetime 'YYYYMMDDTHHMMSS'.
    """
    return value.strftime("%Y%m%dT%H%M%S")


def export_events_to_ics(events: Iterable[CalendarEvent], out_path: str | Path, calendar_name: str = "") -> int:
    """
    Export events to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//MyCalendar//EN")
    lines.append("CALSCALE:GREGORIAN")
    if calendar_name:
        lines.append(f"X-WR-CALNAME:{_ics_escape(calendar_name)}")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    count = 0
    for ev in events:
        dtstart = _dt_local(ev.start)
        uid = f"{ev.name}-{dtstart}"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(uid)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART:{dtstart}")
        lines.append(f"DTEND:{_dt_local(ev.end)}")
        lines.append(f"SUMMARY:{_ics_escape(ev.name)}")
        if ev.location.strip():
            lines.append(f"LOCATION:{_ics_escape(ev.location.strip())}")
        if ev.description.strip():
            lines.append(f"DESCRIPTION:{_ics_escape(ev.description.strip())}")
        lines.append(f"CLASS:{'PUBLIC' if ev.is_public else 'PRIVATE'}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8", newline="")
    except OSError as e:
        raise CalendarFileError(f"Could not write {out}: {e}", path=str(out)) from e

    logger.info("Exported %d event(s) to %s", count, out)
    return count
