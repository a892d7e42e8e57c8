"""Unit tests for the calendarclone command line."""

import argparse
import json
from datetime import date, datetime

import pytest

from calendarclone import __version__
from calendarclone.cli import main_entry
from calendarclone.cli.commands import load_events, read_ics_file
from calendarclone.cli.parser import create_parser, parse_date
from calendarclone.ics.exceptions import EventDataError, ICSContentTooLargeError, ICSError

pytestmark = pytest.mark.unit


def _clock():
    return datetime(2024, 3, 10, 8, 0)


@pytest.fixture
def events_file(isolated_env, sample_events):
    path = isolated_env / "events.json"
    path.write_text(json.dumps([e.to_json_dict() for e in sample_events]), encoding="utf-8")
    return path


@pytest.fixture
def ics_file(isolated_env, fixtures_dir):
    path = isolated_env / "google.ics"
    path.write_bytes((fixtures_dir / "ics" / "google_export.ics").read_bytes())
    return path


class TestParser:
    def test_parse_date(self):
        assert parse_date("2024-03-10") == date(2024, 3, 10)

    def test_parse_date_invalid(self):
        with pytest.raises(argparse.ArgumentTypeError, match="Use YYYY-MM-DD"):
            parse_date("10/03/2024")

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args([])

        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_log_level_case_insensitive(self):
        args = create_parser().parse_args(["--log-level", "debug", "agenda", "e.json"])

        assert args.log_level == "DEBUG"

    def test_agenda_days_must_be_positive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["agenda", "e.json", "--days", "0"])


class TestLoadEvents:
    def test_loads_camel_case_list(self, events_file):
        events = load_events(events_file)

        assert [e.id for e in events] == ["dentist", "gym", "holiday", "cancelled"]

    def test_missing_file(self, isolated_env):
        with pytest.raises(EventDataError, match="Cannot read"):
            load_events(isolated_env / "nope.json")

    def test_invalid_json(self, isolated_env):
        path = isolated_env / "bad.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(EventDataError, match="Invalid JSON"):
            load_events(path)

    def test_not_a_list(self, isolated_env):
        path = isolated_env / "obj.json"
        path.write_text('{"id": "x"}', encoding="utf-8")

        with pytest.raises(EventDataError, match="JSON list"):
            load_events(path)

    def test_invalid_entry(self, isolated_env):
        path = isolated_env / "entry.json"
        path.write_text('[{"id": "x", "title": ""}]', encoding="utf-8")

        with pytest.raises(EventDataError, match="index 0") as exc_info:
            load_events(path)

        assert exc_info.value.source == str(path)


class TestReadIcsFile:
    def test_reads_text(self, ics_file):
        assert read_ics_file(ics_file, 10_000).startswith("BEGIN:VCALENDAR")

    def test_size_limit(self, ics_file):
        with pytest.raises(ICSContentTooLargeError):
            read_ics_file(ics_file, 10)

    def test_missing_file(self, isolated_env):
        with pytest.raises(ICSError):
            read_ics_file(isolated_env / "missing.ics", 10_000)


class TestCommands:
    """End-to-end runs of main_entry against files in a temp directory."""

    def test_export_default_filename(self, events_file, isolated_env, capsys):
        exit_code = main_entry(["export", str(events_file)], clock=_clock)

        assert exit_code == 0
        output = isolated_env / "calendario_2024-03-10.ics"
        data = output.read_bytes()
        assert data.startswith(b"BEGIN:VCALENDAR\r\n")
        assert data.endswith(b"END:VCALENDAR\r\n")
        assert data.count(b"BEGIN:VEVENT") == 3

    def test_export_to_stdout(self, events_file, capsys):
        assert main_entry(["export", str(events_file), "-o", "-"], clock=_clock) == 0

        assert "UID:dentist@calendar-clone" in capsys.readouterr().out

    def test_import_prints_json_and_count(self, ics_file, capsys):
        exit_code = main_entry(["import", str(ics_file), "--calendar", "work"], clock=_clock)

        captured = capsys.readouterr()
        assert exit_code == 0
        events = json.loads(captured.out)
        assert [e["title"] for e in events] == ["Weekly planning", "San José", "Design review"]
        assert {e["calendarId"] for e in events} == {"work"}
        assert "Imported 3 event(s) into 'work', skipped 1 incomplete" in captured.err

    def test_import_to_file(self, ics_file, isolated_env, capsys):
        output = isolated_env / "out.json"

        assert main_entry(["import", str(ics_file), "-o", str(output)], clock=_clock) == 0

        events = json.loads(output.read_text(encoding="utf-8"))
        assert {e["calendarId"] for e in events} == {"primary"}

    def test_import_too_large(self, ics_file, monkeypatch, capsys):
        monkeypatch.setenv("CALENDARCLONE_MAX_ICS_SIZE_BYTES", "100")

        assert main_entry(["import", str(ics_file)], clock=_clock) == 1

        assert "limit is 100" in capsys.readouterr().err

    def test_bad_events_file_exits_1(self, isolated_env, capsys):
        path = isolated_env / "bad.json"
        path.write_text("not json", encoding="utf-8")

        assert main_entry(["export", str(path)], clock=_clock) == 1

        assert "Invalid JSON" in capsys.readouterr().err

    def test_expand(self, events_file, capsys):
        exit_code = main_entry(
            ["expand", str(events_file), "--start", "2024-03-11", "--end", "2024-03-12"],
            clock=_clock,
        )

        assert exit_code == 0
        occurrences = json.loads(capsys.readouterr().out)
        assert [o["id"] for o in occurrences] == ["holiday", "dentist", "gym_2024-03-11"]
        assert occurrences[2]["masterId"] == "gym"
        assert occurrences[2]["instanceDate"] == "2024-03-11"

    def test_expand_inverted_range(self, events_file, capsys):
        exit_code = main_entry(
            ["expand", str(events_file), "--start", "2024-03-12", "--end", "2024-03-11"],
            clock=_clock,
        )

        assert exit_code == 1

    def test_agenda(self, events_file, capsys):
        assert main_entry(["agenda", str(events_file)], clock=_clock) == 0

        out = capsys.readouterr().out
        assert out.splitlines() == [
            "Tomorrow (2024-03-11)",
            "  15:00-16:00  Dentist @ Calle Mayor 5",
            "  19:00-20:00  Gym",
            "Tuesday (2024-03-12)",
            "  all day      Holiday",
        ]

    def test_agenda_calendar_filter(self, events_file, capsys):
        args = ["agenda", str(events_file), "--calendar", "personal", "--days", "2"]

        assert main_entry(args, clock=_clock) == 0

        out = capsys.readouterr().out
        assert "Gym" in out
        assert "Dentist" not in out

    def test_agenda_empty(self, events_file, capsys):
        args = ["agenda", str(events_file), "--start", "2040-01-01", "--days", "3"]

        assert main_entry(args, clock=_clock) == 0

        assert capsys.readouterr().out == "No upcoming events\n"
