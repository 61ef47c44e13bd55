"""
Tests for the CLI entry point.

These tests focus on:
- argument validation (mode is required, headless needs a file)
- headless scripts without a final 'exit' being refused before any command runs
- a full headless run with output captured through a rich Console
"""

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from rich.console import Console

from mycalendar.cli import build_parser, main


def run_cli(argv: list[str]) -> tuple[object, str, str]:
    """
    Run main() and return (exit code, stdout text, stderr text).
    """
    out = io.StringIO()
    err = io.StringIO()
    console = Console(file=out, width=200, no_color=True)
    with contextlib.redirect_stderr(err):
        try:
            main(argv, console=console)
        except SystemExit as e:
            return e.code, out.getvalue(), err.getvalue()
    raise AssertionError("main() did not exit")


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        # Do not read the user's real ~/.mycalendar/config.json
        self.config = self.dir / "config.json"
        self.config.write_text(json.dumps({"default_timezone": "UTC"}), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def script(self, text: str) -> str:
        path = self.dir / "commands.txt"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_mode_is_required(self) -> None:
        code, _, _ = run_cli([])
        self.assertEqual(code, 2)

    def test_mode_is_case_insensitive(self) -> None:
        args = build_parser().parse_args(["--mode", "HEADLESS", "commands.txt"])
        self.assertEqual(args.mode, "headless")

    def test_headless_requires_file(self) -> None:
        code, _, err = run_cli(["--mode", "headless", "--config", str(self.config)])
        self.assertEqual(code, 2)
        self.assertIn("requires a command file", err)

    def test_headless_without_exit_runs_nothing(self) -> None:
        path = self.script("create event Standup from 2025-03-03T09:00 to 2025-03-03T09:15\n")
        code, out, err = run_cli(["--mode", "headless", path, "--config", str(self.config)])
        self.assertEqual(code, 1)
        self.assertIn("must end with 'exit'", err)
        self.assertNotIn("Event created", out)

    def test_headless_missing_file(self) -> None:
        code, _, err = run_cli(["--mode", "headless", str(self.dir / "nope.txt"), "--config", str(self.config)])
        self.assertEqual(code, 1)
        self.assertIn("File Error:", err)

    def test_headless_run(self) -> None:
        path = self.script(
            "\n".join(
                [
                    'create event Standup from 2025-03-03T09:00 to 2025-03-03T09:15 --location "Room 1"',
                    "create event Review from 2025-03-03T09:10 to 2025-03-03T10:00",
                    "show status on 2025-03-03T09:05",
                    "print events on 2025-03-03",
                    "exit",
                    "",
                ]
            )
        )
        code, out, _ = run_cli(["--mode", "headless", path, "--config", str(self.config)])
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0], "Event created successfully.")
        self.assertTrue(lines[1].startswith("Conflict:"))
        self.assertEqual(lines[2], "Busy")
        self.assertIn("- Standup: 2025-03-03 09:00 - 2025-03-03 09:15 @ Room 1", out)
        self.assertNotIn("Review:", out)

    def test_advisory_config(self) -> None:
        self.config.write_text(json.dumps({"reject_conflicts": False}), encoding="utf-8")
        path = self.script(
            "create event Standup from 2025-03-03T09:00 to 2025-03-03T09:15\n"
            "create event Review from 2025-03-03T09:10 to 2025-03-03T10:00\n"
            "show conflicts\n"
            "exit\n"
        )
        code, out, _ = run_cli(["--mode", "headless", path, "--config", str(self.config)])
        self.assertEqual(code, 0)
        self.assertIn("Warning: overlaps 1 existing event(s):", out)
        self.assertIn("Conflicts found: 1", out)


if __name__ == "__main__":
    unittest.main()
