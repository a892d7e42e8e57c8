"""ICS export of calendar events."""

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from icalendar.parser import Contentline

from ..events.models import CalendarEvent
from ..utils.clock import Clock, now_utc, utc_stamp
from .escaping import escape_text

logger = logging.getLogger(__name__)

CRLF = "\r\n"
DEFAULT_PRODID = "-//Calendar Clone//ES"
DEFAULT_UID_DOMAIN = "calendar-clone"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]+")


def format_ics_date(value: datetime, all_day: bool) -> str:
    """Render a naive timestamp as an ICS DATE or local DATE-TIME value."""
    # strftime does not zero-pad years below 1000 on every platform
    text = f"{value.year:04d}{value.month:02d}{value.day:02d}"
    if all_day:
        return text
    return f"{text}T{value.hour:02d}{value.minute:02d}{value.second:02d}"


def strip_control_chars(value: str) -> str:
    """Remove line breaks and other control characters from a raw property value.

    UID and PRODID are written verbatim (not TEXT-escaped), so a stray CR or LF
    would otherwise start a new content line.
    """
    cleaned = _CONTROL_CHARS.sub("", value)
    if cleaned != value:
        logger.debug("Removed control characters from ICS value %r", value)
    return cleaned


class ICSExporter:
    """Serializes events into a single VCALENDAR document."""

    def __init__(self, settings: Optional[Any] = None, clock: Optional[Clock] = None):
        """Initialize the exporter.

        Args:
            settings: Application settings; ``ics_prodid``, ``ics_uid_domain``,
                ``ics_fold_lines`` and ``ics_export_until`` are read when present
            clock: Source of the DTSTAMP time, defaults to the system UTC clock
        """
        self.settings = settings
        self.clock: Clock = clock or now_utc
        self.prodid = strip_control_chars(getattr(settings, "ics_prodid", DEFAULT_PRODID))
        self.uid_domain = strip_control_chars(
            getattr(settings, "ics_uid_domain", DEFAULT_UID_DOMAIN)
        )
        self.fold_lines = bool(getattr(settings, "ics_fold_lines", True))
        self.export_until = bool(getattr(settings, "ics_export_until", True))

    def export(self, events: Iterable[CalendarEvent]) -> str:
        """Encode events as ICS text.

        Soft-deleted events are skipped. Lines end with CRLF.

        Args:
            events: Event definitions (not expanded occurrences)

        Returns:
            ICS document text
        """
        stamp = format_ics_date(utc_stamp(self.clock), False) + "Z"

        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{self.prodid}",
            "CALSCALE:GREGORIAN",
            "METHOD:PUBLISH",
        ]

        exported = skipped = 0
        for event in events:
            if event.is_deleted:
                skipped += 1
                continue
            lines.extend(self._event_lines(event, stamp))
            exported += 1

        lines.append("END:VCALENDAR")

        logger.debug("Exported %d event(s), skipped %d deleted", exported, skipped)

        if self.fold_lines:
            lines = [Contentline(line).to_ical().decode("utf-8") for line in lines]
        return CRLF.join(lines) + CRLF

    def _event_lines(self, event: CalendarEvent, stamp: str) -> list[str]:
        lines = [
            "BEGIN:VEVENT",
            f"UID:{strip_control_chars(event.id)}@{self.uid_domain}",
            f"DTSTAMP:{stamp}",
        ]

        if event.all_day:
            lines.append(f"DTSTART;VALUE=DATE:{format_ics_date(event.start, True)}")
            lines.append(f"DTEND;VALUE=DATE:{format_ics_date(event.end, True)}")
        else:
            lines.append(f"DTSTART:{format_ics_date(event.start, False)}")
            lines.append(f"DTEND:{format_ics_date(event.end, False)}")

        lines.append(f"SUMMARY:{escape_text(event.title)}")
        if event.description:
            lines.append(f"DESCRIPTION:{escape_text(event.description)}")
        if event.location:
            lines.append(f"LOCATION:{escape_text(event.location)}")

        rrule = self._rrule(event)
        if rrule:
            lines.append(rrule)

        lines.append("END:VEVENT")
        return lines

    def _rrule(self, event: CalendarEvent) -> Optional[str]:
        freq = event.recurrence.ics_freq
        if freq is None:
            return None
        rule = f"RRULE:FREQ={freq}"
        if self.export_until and event.recurrence_end is not None:
            rule += f";UNTIL={format_ics_date(event.recurrence_end, event.all_day)}"
        return rule


def encode(
    events: Iterable[CalendarEvent],
    *,
    clock: Optional[Clock] = None,
    settings: Optional[Any] = None,
) -> str:
    """Encode events as ICS text (see :class:`ICSExporter`)."""
    return ICSExporter(settings, clock=clock).export(events)


def export_filename(clock: Optional[Clock] = None) -> str:
    """Download file name for an export made now, e.g. ``calendario_2024-03-10.ics``."""
    today = (clock or now_utc)().date()
    return f"calendario_{today.isoformat()}.ics"
