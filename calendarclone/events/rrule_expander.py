"""Recurring event expansion into concrete occurrences."""

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from ..utils.clock import DateLike, end_of_day, start_of_day
from .models import CalendarEvent, RecurrenceType

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 365
DEFAULT_HORIZON_YEARS = 1

# One recurrence period per type. Month and year steps clamp to the last
# valid day of the target month.
_PERIODS = {
    RecurrenceType.DAILY: relativedelta(days=1),
    RecurrenceType.WEEKLY: relativedelta(weeks=1),
    RecurrenceType.MONTHLY: relativedelta(months=1),
    RecurrenceType.YEARLY: relativedelta(years=1),
}


class RRuleExpander:
    """Expands recurring event definitions over a date window.

    The expander is stateless between calls: every ``expand`` is a pure
    function of the event and the window. Occurrences come back in
    chronological order per event but are not sorted across events; views
    sort them for display.
    """

    def __init__(self, settings: Optional[Any] = None):
        """Initialize RRuleExpander with settings.

        Args:
            settings: Application settings; only ``max_recurrence_iterations``
                and ``recurrence_horizon_years`` are read, both optional
        """
        self.settings = settings
        self.max_iterations = int(
            getattr(settings, "max_recurrence_iterations", DEFAULT_MAX_ITERATIONS)
        )
        self.horizon_years = int(
            getattr(settings, "recurrence_horizon_years", DEFAULT_HORIZON_YEARS)
        )

    def expand(
        self,
        event: CalendarEvent,
        range_start: DateLike,
        range_end: DateLike,
    ) -> list[CalendarEvent]:
        """Return the occurrences of ``event`` overlapping the window.

        The window is closed and inclusive by the day: ``range_start`` counts
        from the start of its day and ``range_end`` through the end of its day.

        Args:
            event: Event definition
            range_start: First day of the window
            range_end: Last day of the window

        Returns:
            ``[event]`` or ``[]`` for a non-recurring event, otherwise one
            occurrence per instance overlapping the window. Soft-deleted events
            always produce ``[]``.
        """
        if event.is_deleted:
            return []

        window_start = start_of_day(range_start)
        window_end = end_of_day(range_end)
        if window_start > window_end:
            logger.debug("Empty expansion window %s..%s", window_start, window_end)
            return []

        period = _PERIODS.get(event.recurrence)
        if period is None:
            return [event] if event.overlaps(window_start, window_end) else []

        instances = [
            start
            for start, end in self._instances(event, period, window_end)
            if end >= window_start
        ]

        logger.debug(
            "Expanded %s (%s) to %d occurrence(s) in %s..%s",
            event.id,
            event.recurrence.value,
            len(instances),
            window_start.date(),
            window_end.date(),
        )
        return self.generate_event_instances(event, instances)

    def _recurrence_limit(self, event: CalendarEvent, window_end: datetime) -> datetime:
        """Last moment an instance may start at."""
        if event.recurrence_end is not None:
            return event.recurrence_end
        try:
            return window_end + relativedelta(years=self.horizon_years)
        except (OverflowError, ValueError):
            return datetime.max

    def _instances(
        self, event: CalendarEvent, period: relativedelta, window_end: datetime
    ) -> Iterator[tuple[datetime, datetime]]:
        """Yield (start, end) per instance from the original start up to the window end.

        Each start is computed from the original start, so a monthly series
        anchored on the 31st keeps returning to the 31st after short months.
        """
        limit = self._recurrence_limit(event, window_end)

        for step in range(self.max_iterations):
            try:
                current = event.start + period * step
                current_end = current + event.duration
            except (OverflowError, ValueError):
                logger.debug("Recurrence of %s ran past the representable calendar", event.id)
                return
            if current > window_end or current > limit:
                return
            yield current, current_end
        else:
            logger.debug(
                "Recurrence of %s stopped at the %d-step safety ceiling",
                event.id,
                self.max_iterations,
            )

    def generate_event_instances(
        self,
        master_event: CalendarEvent,
        occurrences: list[datetime],
    ) -> list[CalendarEvent]:
        """Generate an occurrence copy of the master for each instance start.

        Args:
            master_event: Master recurring event template
            occurrences: Instance start times

        Returns:
            Occurrence events with ``id`` ``"{master id}_{YYYY-MM-DD}"``
        """
        duration = master_event.duration
        events = []

        for occurrence in occurrences:
            instance_date = occurrence.date()
            events.append(
                master_event.model_copy(
                    update={
                        "id": f"{master_event.id}_{instance_date.isoformat()}",
                        "start": occurrence,
                        "end": occurrence + duration,
                        "master_id": master_event.id,
                        "instance_date": instance_date,
                    }
                )
            )

        return events

    def expand_all(
        self,
        events: Iterable[CalendarEvent],
        range_start: DateLike,
        range_end: DateLike,
    ) -> list[CalendarEvent]:
        """Expand every event over the same window, preserving input order."""
        expanded: list[CalendarEvent] = []
        for event in events:
            expanded.extend(self.expand(event, range_start, range_end))
        return expanded


def expand(
    event: CalendarEvent,
    range_start: DateLike,
    range_end: DateLike,
    *,
    max_iterations: Optional[int] = None,
) -> list[CalendarEvent]:
    """Expand one event over ``[range_start, range_end]`` with default settings.

    ``max_iterations`` overrides the 365-step safety ceiling.
    """
    expander = RRuleExpander()
    if max_iterations is not None:
        expander.max_iterations = max_iterations
    return expander.expand(event, range_start, range_end)
