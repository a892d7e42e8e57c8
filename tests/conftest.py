"""Shared test configuration and lightweight fixtures."""

import logging
import os
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import Mock

import pytest

from calendarclone.config.settings import CalendarCloneSettings, reset_settings
from calendarclone.events.models import CalendarEvent, RecurrenceType

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FIXED_NOW = datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config: Any) -> None:
    """Register markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock pinned to 2024-03-10 12:00 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def test_settings() -> Mock:
    """Mock settings object with the defaults the engine reads."""
    settings = Mock(spec=CalendarCloneSettings)
    settings.log_level = "ERROR"
    settings.log_file = None
    settings.max_recurrence_iterations = 365
    settings.recurrence_horizon_years = 1
    settings.ics_prodid = "-//Calendar Clone//ES"
    settings.ics_uid_domain = "calendar-clone"
    settings.ics_fold_lines = True
    settings.ics_export_until = True
    settings.max_ics_size_bytes = 50 * 1024 * 1024
    settings.default_calendar_id = "primary"
    settings.agenda_days = 7
    return settings


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    """Run with no CALENDARCLONE_* variables and a clean working directory."""
    for name in list(os.environ):
        if name.startswith("CALENDARCLONE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reset_settings()
    yield tmp_path
    reset_settings()


@pytest.fixture
def make_event() -> Callable[..., CalendarEvent]:
    """Factory for events with sensible defaults; keyword overrides win."""

    def _make(**overrides: Any) -> CalendarEvent:
        data: dict[str, Any] = {
            "id": "evt-1",
            "title": "Standup",
            "start": datetime(2024, 3, 4, 9, 0),
            "end": datetime(2024, 3, 4, 9, 30),
            "calendar_id": "primary",
        }
        data.update(overrides)
        return CalendarEvent(**data)

    return _make


@pytest.fixture
def daily_event(make_event: Callable[..., CalendarEvent]) -> CalendarEvent:
    return make_event(id="daily", title="Daily sync", recurrence=RecurrenceType.DAILY)


@pytest.fixture
def sample_events(make_event: Callable[..., CalendarEvent]) -> list[CalendarEvent]:
    """A small calendar: one-off, weekly, all-day and a deleted event."""
    return [
        make_event(
            id="dentist",
            title="Dentist",
            start=datetime(2024, 3, 11, 15, 0),
            end=datetime(2024, 3, 11, 16, 0),
            location="Calle Mayor 5",
        ),
        make_event(
            id="gym",
            title="Gym",
            start=datetime(2024, 3, 4, 19, 0),
            end=datetime(2024, 3, 4, 20, 0),
            recurrence=RecurrenceType.WEEKLY,
            calendar_id="personal",
        ),
        make_event(
            id="holiday",
            title="Holiday",
            start=datetime(2024, 3, 12),
            end=datetime(2024, 3, 13),
            all_day=True,
        ),
        make_event(
            id="cancelled",
            title="Cancelled",
            start=datetime(2024, 3, 11, 10, 0),
            end=datetime(2024, 3, 11, 11, 0),
            is_deleted=True,
        ),
    ]


@pytest.fixture(autouse=True)
def _reset_calendarclone_logger() -> Iterator[None]:
    """Undo setup_logging between tests so caplog sees records."""
    yield
    logger = logging.getLogger("calendarclone")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
