"""Day and agenda helpers built on the recurrence expander.

These are the caller side of the expander: filtering by visible calendars,
dropping deleted events and ordering occurrences for display.
"""

import logging
from collections.abc import Collection, Iterable
from datetime import date, timedelta
from typing import Optional

from ..utils.clock import DateLike, day_range, now_local, to_datetime
from .models import AgendaGroup, CalendarEvent
from .rrule_expander import RRuleExpander

logger = logging.getLogger(__name__)


def sort_for_display(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """All-day events first, then by start time."""
    return sorted(events, key=lambda e: (not e.all_day, e.start))


def _visible(
    events: Iterable[CalendarEvent], visible_calendar_ids: Optional[Collection[str]]
) -> list[CalendarEvent]:
    return [
        event
        for event in events
        if not event.is_deleted
        and (visible_calendar_ids is None or event.calendar_id in visible_calendar_ids)
    ]


def events_for_day(
    events: Iterable[CalendarEvent],
    day: DateLike,
    visible_calendar_ids: Optional[Collection[str]] = None,
    expander: Optional[RRuleExpander] = None,
) -> list[CalendarEvent]:
    """Occurrences touching ``day``, ordered for a day or week column.

    Args:
        events: Stored event definitions
        day: Day to show
        visible_calendar_ids: Calendars currently shown; None shows all
        expander: Expander to use, defaults to one with default settings

    Returns:
        Occurrences overlapping the day, all-day first, then by start
    """
    expander = expander or RRuleExpander()
    occurrences = expander.expand_all(_visible(events, visible_calendar_ids), day, day)
    return sort_for_display(occurrences)


def relative_date_label(day: date, today: date) -> str:
    """Human label for an agenda day relative to ``today``."""
    delta = (day - today).days
    if delta == 0:
        return "Today"
    if delta == 1:
        return "Tomorrow"
    if delta == -1:
        return "Yesterday"
    if 1 < delta <= 7:
        return day.strftime("%A")
    return f"{day:%a} {day.day} {day:%b}"


def group_events_by_date(
    events: Iterable[CalendarEvent],
    start_date: DateLike,
    days: int,
    visible_calendar_ids: Optional[Collection[str]] = None,
    today: Optional[date] = None,
    expander: Optional[RRuleExpander] = None,
) -> list[AgendaGroup]:
    """Group occurrences by the day they start on, for the agenda view.

    Days without events are left out. Events that started before
    ``start_date`` are not repeated on later days.
    """
    if days <= 0:
        return []

    first = to_datetime(start_date).date()
    last = first + timedelta(days=days - 1)
    today = today or now_local().date()
    expander = expander or RRuleExpander()

    occurrences = expander.expand_all(_visible(events, visible_calendar_ids), first, last)

    by_day: dict[date, list[CalendarEvent]] = {}
    for occurrence in occurrences:
        by_day.setdefault(occurrence.start.date(), []).append(occurrence)

    groups = []
    for day in day_range(first, days):
        day_events = by_day.get(day)
        if not day_events:
            continue
        groups.append(
            AgendaGroup(
                day=day,
                label=relative_date_label(day, today),
                events=sorted(day_events, key=lambda e: e.start),
            )
        )

    logger.debug("Agenda %s..%s: %d day(s) with events", first, last, len(groups))
    return groups
