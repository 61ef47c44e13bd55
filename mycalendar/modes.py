"""
Input modes (where command lines come from).

- interactive: read one line at a time from the user until "exit" or EOF
- headless:    replay a command file; the file is read completely at startup
               and its last non-blank line must be "exit" (any case),
               otherwise startup fails before any command runs
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from mycalendar.errors import CalendarFileError, HeadlessScriptError

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
PROMPT = "> "


class Mode(Enum):
    INTERACTIVE = "interactive"
    HEADLESS = "headless"


def is_exit(line: str) -> bool:
    return line.strip().lower() == EXIT_COMMAND


class ModeHandler(ABC):
    """
    Source of command lines for the controller.
    """

    mode: Mode

    @abstractmethod
    def commands(self) -> Iterator[str]:
        ...


class InteractiveMode(ModeHandler):
    mode = Mode.INTERACTIVE

    def __init__(self, reader: Callable[[str], str] = input, prompt: str = PROMPT) -> None:
        self.reader = reader
        self.prompt = prompt

    def commands(self) -> Iterator[str]:
        while True:
            try:
                line = self.reader(self.prompt)
            except EOFError:
                logger.debug("End of interactive input")
                return
            yield line
            if is_exit(line):
                return


class HeadlessMode(ModeHandler):
    mode = Mode.HEADLESS

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.lines = self._load()

    def _load(self) -> list[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CalendarFileError(f"Could not read command file {self.path}: {e}", path=str(self.path)) from e

        lines = text.splitlines()
        non_blank = [line for line in lines if line.strip()]
        if not non_blank or not is_exit(non_blank[-1]):
            raise HeadlessScriptError(
                f"Command file must end with '{EXIT_COMMAND}' in headless mode: {self.path}", path=str(self.path)
            )
        logger.info("Loaded %d command line(s) from %s", len(lines), self.path)
        return lines

    def commands(self) -> Iterator[str]:
        return iter(self.lines)


def create_mode(
    mode: Mode,
    path: Optional[str | Path] = None,
    reader: Optional[Callable[[str], str]] = None,
) -> ModeHandler:
    if mode is Mode.HEADLESS:
        if path is None:
            raise HeadlessScriptError("Missing command file for headless mode")
        return HeadlessMode(path)
    return InteractiveMode(reader=reader or input)
