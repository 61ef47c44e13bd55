import unittest
from datetime import date, datetime

from mycalendar.errors import CommandError
from mycalendar.parse import (
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
    tokenize,
)


class TestTokenize(unittest.TestCase):
    def test_quotes_group_tokens(self) -> None:
        self.assertEqual(
            tokenize('create event "Team sync" on 2025-03-03 --location "Room 1"'),
            ["create", "event", "Team sync", "on", "2025-03-03", "--location", "Room 1"],
        )

    def test_blank(self) -> None:
        self.assertEqual(tokenize("   "), [])
        self.assertIsNone(parse_command("   "))


class TestCalendarCommands(unittest.TestCase):
    def test_create_calendar(self) -> None:
        cmd = parse_command("create calendar --name Work --timezone Europe/Paris")
        self.assertEqual(cmd, CreateCalendar(name="Work", timezone="Europe/Paris"))

    def test_create_calendar_missing_timezone(self) -> None:
        with self.assertRaises(CommandError):
            parse_command("create calendar --name Work")

    def test_use_calendar(self) -> None:
        self.assertEqual(parse_command("USE Calendar --name Work"), UseCalendar(name="Work"))

    def test_use_calendar_extra_args(self) -> None:
        with self.assertRaises(CommandError):
            parse_command("use calendar --name Work now")

    def test_edit_calendar(self) -> None:
        cmd = parse_command("edit calendar --name Work --property timezone Asia/Tokyo")
        self.assertEqual(cmd, EditCalendar(name="Work", prop="timezone", value="Asia/Tokyo"))


class TestEventCommands(unittest.TestCase):
    def test_create_timed_event_with_options(self) -> None:
        cmd = parse_command(
            'create event --autoDecline "Team sync" from 2025-03-03T09:00 to 2025-03-03T10:00 '
            '--description "Weekly sync" --location Room1 --private'
        )
        self.assertEqual(
            cmd,
            CreateEvent(
                name="Team sync",
                start=datetime(2025, 3, 3, 9, 0),
                end=datetime(2025, 3, 3, 10, 0),
                description="Weekly sync",
                location="Room1",
                is_public=False,
                auto_decline=True,
            ),
        )

    def test_create_all_day_event(self) -> None:
        cmd = parse_command("create event Holiday on 2025-03-03")
        self.assertIsInstance(cmd, CreateEvent)
        assert isinstance(cmd, CreateEvent)
        self.assertEqual(cmd.start, datetime(2025, 3, 3, 0, 0))
        self.assertEqual(cmd.end, datetime(2025, 3, 3, 23, 59, 59))
        self.assertTrue(cmd.is_public)
        self.assertFalse(cmd.auto_decline)

    def test_create_event_errors(self) -> None:
        bad_lines = [
            "create event",
            "create event Standup",
            "create event Standup at 2025-03-03T09:00",
            "create event Standup from 2025-03-03T09:00",
            "create event Standup from 2025-03-03T09:00 until 2025-03-03T10:00",
            "create event Standup from tomorrow to 2025-03-03T10:00",
            "create event Standup on 2025-13-01",
            "create event Standup on 2025-03-03 --location",
            "create event Standup on 2025-03-03 --location A --location B",
            "create event Standup on 2025-03-03 --color red",
            "create event Standup on 2025-03-03 repeats MWF for 3 times",
            "create event Standup from 2025-03-03T09:00+01:00 to 2025-03-03T10:00+01:00",
        ]
        for line in bad_lines:
            with self.subTest(line=line):
                with self.assertRaises(CommandError):
                    parse_command(line)

    def test_error_keeps_line(self) -> None:
        with self.assertRaises(CommandError) as ctx:
            parse_command("create event Standup")
        self.assertEqual(ctx.exception.line, "create event Standup")

    def test_edit_event(self) -> None:
        cmd = parse_command("edit event location Standup from 2025-03-03T09:00 to 2025-03-03T09:15 with Hallway")
        self.assertEqual(
            cmd,
            EditEvent(
                prop="location",
                name="Standup",
                start=datetime(2025, 3, 3, 9, 0),
                end=datetime(2025, 3, 3, 9, 15),
                value="Hallway",
            ),
        )

    def test_edit_events_with_and_without_from(self) -> None:
        self.assertEqual(
            parse_command("edit events name Standup from 2025-03-03T00:00 with Daily"),
            EditEvents(prop="name", name="Standup", since=datetime(2025, 3, 3), value="Daily"),
        )
        self.assertEqual(
            parse_command("edit events name Standup Daily"),
            EditEvents(prop="name", name="Standup", since=None, value="Daily"),
        )

    def test_remove_event(self) -> None:
        self.assertEqual(
            parse_command("remove event Standup on 2025-03-03T09:00"),
            RemoveEvent(name="Standup", start=datetime(2025, 3, 3, 9, 0)),
        )


class TestQueryCommands(unittest.TestCase):
    def test_print_on_date(self) -> None:
        self.assertEqual(
            parse_command("print events on 2025-03-03"),
            PrintEvents(start=datetime(2025, 3, 3, 0, 0), end=datetime(2025, 3, 3, 23, 59, 59)),
        )

    def test_print_range(self) -> None:
        self.assertEqual(
            parse_command("print events from 2025-03-03T08:00 to 2025-03-04T08:00"),
            PrintEvents(start=datetime(2025, 3, 3, 8, 0), end=datetime(2025, 3, 4, 8, 0)),
        )

    def test_print_invalid(self) -> None:
        with self.assertRaises(CommandError):
            parse_command("print events")

    def test_show_status_rejects_utc_offset(self) -> None:
        with self.assertRaises(CommandError):
            parse_command("show status on 2025-03-03T09:30+00:00")

    def test_show_status(self) -> None:
        self.assertEqual(
            parse_command("show status on 2025-03-03T09:05"), ShowStatus(at=datetime(2025, 3, 3, 9, 5))
        )

    def test_show_conflicts(self) -> None:
        self.assertEqual(parse_command("show conflicts"), ShowConflicts())

    def test_unknown_command(self) -> None:
        with self.assertRaises(CommandError):
            parse_command("delete everything")


class TestCopyAndFileCommands(unittest.TestCase):
    def test_copy_event(self) -> None:
        self.assertEqual(
            parse_command("copy event Standup on 2025-03-03T09:00 --target Backup to 2025-03-10T09:00"),
            CopyEvent(
                name="Standup",
                start=datetime(2025, 3, 3, 9, 0),
                target="Backup",
                target_start=datetime(2025, 3, 10, 9, 0),
            ),
        )

    def test_copy_events_on(self) -> None:
        self.assertEqual(
            parse_command("copy events on 2025-03-03 --target Backup to 2025-03-10"),
            CopyEvents(
                from_date=date(2025, 3, 3), to_date=date(2025, 3, 3), target="Backup", target_date=date(2025, 3, 10)
            ),
        )

    def test_copy_events_between(self) -> None:
        self.assertEqual(
            parse_command("copy events between 2025-03-03 and 2025-03-07 --target Backup to 2025-03-10"),
            CopyEvents(
                from_date=date(2025, 3, 3), to_date=date(2025, 3, 7), target="Backup", target_date=date(2025, 3, 10)
            ),
        )

    def test_copy_events_missing_target(self) -> None:
        with self.assertRaises(CommandError):
            parse_command("copy events on 2025-03-03 to 2025-03-10")

    def test_export_and_import(self) -> None:
        self.assertEqual(parse_command("export cal out.csv"), ExportCalendar(path="out.csv"))
        self.assertEqual(parse_command("import cal in.csv"), ImportCalendar(path="in.csv", timezone=None))
        self.assertEqual(
            parse_command("import cal in.csv --timezone UTC"), ImportCalendar(path="in.csv", timezone="UTC")
        )


if __name__ == "__main__":
    unittest.main()
