"""Calendar Clone - recurring event expansion and ICS import/export engine."""

__version__ = "1.0.0"
__author__ = "Calendar Clone Team"
__description__ = "Recurring event expansion and ICS interchange for a calendar application"

from .events import (  # noqa: E402
    AgendaGroup,
    CalendarEvent,
    EventNotification,
    EventType,
    RecurrenceType,
    RRuleExpander,
    events_for_day,
    expand,
    group_events_by_date,
    relative_date_label,
    sort_for_display,
)
from .ics import ICSExporter, ICSParser, ICSParseResult, decode, encode, export_filename  # noqa: E402

__all__ = [
    "AgendaGroup",
    "CalendarEvent",
    "EventNotification",
    "EventType",
    "ICSExporter",
    "ICSParseResult",
    "ICSParser",
    "RRuleExpander",
    "RecurrenceType",
    "__author__",
    "__description__",
    "__version__",
    "decode",
    "encode",
    "events_for_day",
    "expand",
    "export_filename",
    "group_events_by_date",
    "relative_date_label",
    "sort_for_display",
]
