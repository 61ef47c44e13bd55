"""
CLI (Command Line Interface) and composition root.

    mycalendar --mode interactive
    mycalendar --mode headless commands.txt

The mode selects both the input source and the view. Everything is wired
here: config -> model -> view -> controller -> mode.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console

from mycalendar.config import load_config
from mycalendar.controller import CalendarController
from mycalendar.errors import CalendarError, format_error_for_user
from mycalendar.model import CalendarModel
from mycalendar.modes import Mode, create_mode
from mycalendar.view import create_view

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser.
    """
    parser = argparse.ArgumentParser(prog="mycalendar", description="MyCalendar console calendar")
    parser.add_argument(
        "--mode",
        required=True,
        type=str.lower,
        choices=[m.value for m in Mode],
        help="interactive (type commands) or headless (run a command file)",
    )
    parser.add_argument("file", nargs="?", help="Command file for headless mode (must end with 'exit')")
    parser.add_argument("--config", type=str, default=None, help="Path to config.json")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _setup_logging(level_name: str, debug: bool) -> None:
    level = logging.DEBUG if debug else getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level,
    )


def main(argv: list[str] | None = None, console: Optional[Console] = None) -> None:
    """
    CLI entry point. Exits via SystemExit:
    0 = finished, 1 = startup failure, 2 = usage error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    mode = Mode(args.mode)

    if mode is Mode.HEADLESS and not args.file:
        parser.error("headless mode requires a command file")

    config = load_config(args.config)
    _setup_logging(config.log_level, args.debug)

    view = create_view(mode, console)
    try:
        # Headless files are validated here, before any command runs
        handler = create_mode(mode, path=args.file, reader=view.read_command)
        model = CalendarModel(reject_conflicts=config.reject_conflicts)
        controller = CalendarController(model, view, config)
        controller.start()
    except CalendarError as e:
        print(format_error_for_user(e), file=sys.stderr)
        raise SystemExit(1)

    try:
        controller.run(handler.commands())
    except KeyboardInterrupt:
        view.display("")

    raise SystemExit(0)
