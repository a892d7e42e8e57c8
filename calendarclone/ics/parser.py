"""Tolerant ICS import.

The parser scans content lines itself instead of handing the whole document
to a strict iCalendar reader: a broken line or an incomplete VEVENT only loses
that line or that event, never the rest of the file.
"""

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from icalendar import vDate, vDatetime
from pydantic import ValidationError

from ..events.models import CalendarEvent, EventType, RecurrenceType
from ..utils.clock import Clock, as_naive, now_utc, start_of_day
from .escaping import unescape_text
from .models import ICSParseResult

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_ID = "primary"

_LINE_BREAK = re.compile(r"\r?\n")
_DATE_VALUE = re.compile(r"^\d{8}$")
_DATETIME_VALUE = re.compile(r"^(\d{8})T(\d{4}(?:\d{2})?)Z?$", re.IGNORECASE)

ContentLine = tuple[str, dict[str, str], str]


def unfold_lines(ics_text: str) -> list[str]:
    """Split ICS text into logical lines.

    A physical line starting with a space or tab continues the previous one;
    that single leading whitespace character is removed before joining.
    """
    logical: list[str] = []
    for physical in _LINE_BREAK.split(ics_text):
        if physical.startswith((" ", "\t")):
            if logical:
                logical[-1] += physical[1:]
            continue
        logical.append(physical)
    return logical


def split_content_line(line: str) -> Optional[ContentLine]:
    """Split ``NAME;PARAM=VALUE:value`` into its parts.

    Returns:
        ``(NAME, {PARAM: value}, value)`` with upper-cased names, or None when
        the line has no name or no value separator
    """
    in_quotes = False
    separators = []
    value_index = -1
    for index, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char == ";":
            separators.append(index)
        elif not in_quotes and char == ":":
            value_index = index
            break
    if value_index < 0:
        return None

    bounds = [-1, *separators, value_index]
    pieces = [line[bounds[i] + 1 : bounds[i + 1]] for i in range(len(bounds) - 1)]
    name = pieces[0].strip().upper()
    if not name:
        return None

    params: dict[str, str] = {}
    for piece in pieces[1:]:
        key, sep, raw = piece.partition("=")
        if sep:
            params[key.strip().upper()] = raw.strip().strip('"')

    return name, params, line[value_index + 1 :]


def parse_ics_date(value: str, params: Optional[dict[str, str]] = None) -> Optional[tuple[datetime, bool]]:
    """Parse a DTSTART/DTEND style value.

    Accepts ``YYYYMMDD`` and ``YYYYMMDDTHHMM[SS][Z]``. A trailing ``Z`` is
    accepted but no offset is applied: the wall-clock fields are kept as a
    naive timestamp.

    Returns:
        ``(timestamp, is_date_only)`` or None if the value can't be parsed
    """
    payload = value.strip()
    value_type = (params or {}).get("VALUE", "").upper()

    try:
        if _DATE_VALUE.match(payload):
            return start_of_day(vDate.from_ical(payload)), True

        match = _DATETIME_VALUE.match(payload)
        if match is None:
            return None
        date_part, time_part = match.groups()
        if len(time_part) == 4:
            time_part += "00"
        parsed = as_naive(vDatetime.from_ical(f"{date_part}T{time_part}"))
    except ValueError:
        return None

    if value_type == "DATE":
        return start_of_day(parsed), True
    return parsed, False


def parse_rrule_value(value: str) -> dict[str, str]:
    """Split an RRULE value into upper-cased ``{KEY: value}`` pairs."""
    parts: dict[str, str] = {}
    for part in value.split(";"):
        key, sep, raw = part.partition("=")
        if sep and key.strip():
            parts[key.strip().upper()] = raw.strip()
    return parts


@dataclass
class _EventDraft:
    """Fields collected between BEGIN:VEVENT and END:VEVENT."""

    id: str
    created_at: datetime
    title: Optional[str] = None
    description: str = ""
    location: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    all_day: bool = False
    recurrence: RecurrenceType = RecurrenceType.NONE
    recurrence_end: Optional[datetime] = None
    nested_depth: int = 0

    @property
    def is_complete(self) -> bool:
        return bool(self.title) and self.start is not None and self.end is not None


class ICSParser:
    """Decodes ICS text into calendar events for a single target calendar."""

    def __init__(
        self,
        settings: Optional[Any] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        """Initialize the parser.

        Args:
            settings: Application settings; ``default_calendar_id`` is read when present
            clock: Source of created/updated timestamps for imported events
            id_factory: Generates ids for events without a usable UID
        """
        self.settings = settings
        self.clock: Clock = clock or now_utc
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.default_calendar_id = getattr(settings, "default_calendar_id", DEFAULT_CALENDAR_ID)

        self._property_handlers: dict[str, Callable[[_EventDraft, dict[str, str], str], None]] = {
            "SUMMARY": self._on_summary,
            "DESCRIPTION": self._on_description,
            "LOCATION": self._on_location,
            "DTSTART": self._on_dtstart,
            "DTEND": self._on_dtend,
            "RRULE": self._on_rrule,
            "UID": self._on_uid,
        }

    def parse(self, ics_text: str, target_calendar_id: Optional[str] = None) -> ICSParseResult:
        """Parse ICS text.

        Never raises for malformed content: unparsable lines are skipped and
        VEVENT blocks lacking a title, start or end are dropped.

        Args:
            ics_text: Raw ICS document
            target_calendar_id: Calendar assigned to every imported event

        Returns:
            ICSParseResult with the decoded events and counts
        """
        calendar_id = target_calendar_id or self.default_calendar_id
        result = ICSParseResult(calendar_id=calendar_id, parse_time=self.clock())
        draft: Optional[_EventDraft] = None

        for line in unfold_lines(ics_text or ""):
            if not line.strip():
                continue
            parts = split_content_line(line)
            if parts is None:
                result.ignored_line_count += 1
                continue
            name, params, value = parts
            component = value.strip().upper()

            if name == "BEGIN" and component == "VEVENT":
                if draft is not None:
                    logger.debug("VEVENT %s never closed, dropping it", draft.id)
                    result.skipped_count += 1
                draft = self._new_draft()
                result.total_components += 1
            elif draft is None:
                self._on_calendar_property(result, name, value)
            elif name == "END" and component == "VEVENT":
                event = self._finalize(draft, calendar_id)
                if event is None:
                    result.skipped_count += 1
                else:
                    result.events.append(event)
                draft = None
            elif name == "BEGIN":
                # VALARM and friends: their properties don't belong to the event
                draft.nested_depth += 1
            elif name == "END":
                draft.nested_depth = max(draft.nested_depth - 1, 0)
            elif draft.nested_depth == 0:
                handler = self._property_handlers.get(name)
                if handler is not None:
                    handler(draft, params, value)

        if draft is not None:
            logger.debug("ICS text ended inside VEVENT %s, dropping it", draft.id)
            result.skipped_count += 1

        result.event_count = len(result.events)
        result.recurring_event_count = sum(1 for e in result.events if e.is_recurring)
        logger.debug(
            "Imported %d event(s) into %s, skipped %d, ignored %d line(s)",
            result.event_count,
            calendar_id,
            result.skipped_count,
            result.ignored_line_count,
        )
        return result

    def _new_draft(self) -> _EventDraft:
        return _EventDraft(id=self.id_factory(), created_at=as_naive(self.clock()))

    def _finalize(self, draft: _EventDraft, calendar_id: str) -> Optional[CalendarEvent]:
        if not draft.is_complete:
            logger.debug("Dropping VEVENT %s without title, start or end", draft.id)
            return None
        try:
            return CalendarEvent(
                id=draft.id,
                title=draft.title,
                description=draft.description,
                location=draft.location,
                start=draft.start,
                end=draft.end,
                all_day=draft.all_day,
                calendar_id=calendar_id,
                type=EventType.EVENT,
                recurrence=draft.recurrence,
                recurrence_end=draft.recurrence_end,
                is_deleted=False,
                created_at=draft.created_at,
                updated_at=draft.created_at,
            )
        except ValidationError as e:
            logger.debug("Dropping invalid VEVENT %s: %s", draft.id, e.errors()[0]["msg"])
            return None

    @staticmethod
    def _on_calendar_property(result: ICSParseResult, name: str, value: str) -> None:
        if name == "PRODID":
            result.prodid = value.strip()
        elif name == "VERSION":
            result.ics_version = value.strip()
        elif name == "X-WR-CALNAME":
            result.calendar_name = unescape_text(value)

    def _on_summary(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        draft.title = unescape_text(value)

    def _on_description(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        draft.description = unescape_text(value)

    def _on_location(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        draft.location = unescape_text(value)

    def _on_dtstart(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        parsed = parse_ics_date(value, params)
        if parsed is None:
            logger.debug("Ignoring unparsable DTSTART %r", value)
            return
        draft.start, date_only = parsed
        draft.all_day = draft.all_day or date_only

    def _on_dtend(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        parsed = parse_ics_date(value, params)
        if parsed is None:
            logger.debug("Ignoring unparsable DTEND %r", value)
            return
        draft.end, date_only = parsed
        draft.all_day = draft.all_day or date_only

    def _on_rrule(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        rule = parse_rrule_value(value)
        draft.recurrence = RecurrenceType.from_ics_freq(rule.get("FREQ"))
        until = rule.get("UNTIL")
        if until:
            parsed = parse_ics_date(until)
            draft.recurrence_end = parsed[0] if parsed else None

    def _on_uid(self, draft: _EventDraft, params: dict[str, str], value: str) -> None:
        uid = value.split("@", 1)[0].strip()
        if uid:
            draft.id = uid


def decode(
    ics_text: str,
    target_calendar_id: str,
    *,
    clock: Optional[Clock] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """Decode ICS text into events assigned to ``target_calendar_id``."""
    parser = ICSParser(clock=clock, id_factory=id_factory)
    return parser.parse(ics_text, target_calendar_id).events
