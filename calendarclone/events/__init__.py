"""Event models, recurrence expansion and view helpers."""

from .models import (
    AgendaGroup,
    CalendarEvent,
    EventNotification,
    EventType,
    NotificationTimeUnit,
    NotificationType,
    RecurrenceType,
)
from .rrule_expander import RRuleExpander, expand
from .views import events_for_day, group_events_by_date, relative_date_label, sort_for_display

__all__ = [
    "AgendaGroup",
    "CalendarEvent",
    "EventNotification",
    "EventType",
    "NotificationTimeUnit",
    "NotificationType",
    "RRuleExpander",
    "RecurrenceType",
    "events_for_day",
    "expand",
    "group_events_by_date",
    "relative_date_label",
    "sort_for_display",
]
