"""
Console views.

Both views print through a rich Console so tests can capture output by
passing Console(file=io.StringIO()).

- InteractiveView: welcome banner, coloured warnings/errors, events as a table
- HeadlessView:    plain lines only (output is usually redirected to a file)
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mycalendar.model import CalendarEvent
from mycalendar.modes import Mode

DT_FORMAT = "%Y-%m-%d %H:%M"


def event_line(ev: CalendarEvent) -> str:
    bits = [f"{ev.name}: {ev.start.strftime(DT_FORMAT)} - {ev.end.strftime(DT_FORMAT)}"]
    if ev.location:
        bits.append(f"@ {ev.location}")
    if not ev.is_public:
        bits.append("(private)")
    return " ".join(bits)


class View:
    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display(self, message: str = "") -> None:
        self.console.print(message, markup=False, highlight=False)

    def display_warning(self, message: str) -> None:
        self.display(f"Warning: {message}")

    def display_error(self, message: str) -> None:
        self.display(message)

    def display_events(self, events: Sequence[CalendarEvent], title: str = "Events") -> None:
        if not events:
            self.display("No events found.")
            return
        self.display(f"{title}:")
        for ev in events:
            self.display(f"- {event_line(ev)}")

    def display_conflicts(self, pairs: Iterable[tuple[CalendarEvent, CalendarEvent]]) -> None:
        pairs = list(pairs)
        if not pairs:
            self.display("No conflicts found.")
            return
        self.display(f"Conflicts found: {len(pairs)}")
        for a, b in pairs:
            self.display(f"- {event_line(a)}  <->  {event_line(b)}")

    def welcome(self) -> None:
        pass

    def read_command(self, prompt: str) -> str:
        return self.console.input(prompt)


class InteractiveView(View):
    def welcome(self) -> None:
        self.console.print("\n[bold]=== MyCalendar (interactive) ===[/]")
        self.console.print("Type commands like: create event Standup from 2025-03-03T09:00 to 2025-03-03T09:15")
        self.console.print("Type 'exit' to quit.\n", highlight=False)

    def display_warning(self, message: str) -> None:
        self.console.print(f"[yellow]Warning:[/] {escape(message)}", highlight=False)

    def display_error(self, message: str) -> None:
        self.console.print(f"[bold red]{escape(message)}[/]", highlight=False)

    def display_events(self, events: Sequence[CalendarEvent], title: str = "Events") -> None:
        if not events:
            self.display("No events found.")
            return

        table = Table(title=title, box=box.SIMPLE)
        table.add_column("#", justify="right")
        table.add_column("Event")
        table.add_column("Start")
        table.add_column("End")
        table.add_column("Location")
        table.add_column("Visibility")
        for i, ev in enumerate(events, start=1):
            table.add_row(
                str(i),
                f"[bold cyan]{escape(ev.name)}[/]",
                ev.start.strftime(DT_FORMAT),
                ev.end.strftime(DT_FORMAT),
                escape(ev.location),
                "public" if ev.is_public else "[magenta]private[/]",
            )
        self.console.print(table)


class HeadlessView(View):
    def __init__(self, console: Optional[Console] = None) -> None:
        super().__init__(console or Console(no_color=True, highlight=False))


_VIEWS: dict[Mode, type[View]] = {
    Mode.INTERACTIVE: InteractiveView,
    Mode.HEADLESS: HeadlessView,
}


def create_view(mode: Mode, console: Optional[Console] = None) -> View:
    return _VIEWS[mode](console)
