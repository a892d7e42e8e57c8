"""Data models for calendar events and their expanded occurrences."""

import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.clock import as_naive, start_of_day

logger = logging.getLogger(__name__)


class RecurrenceType(str, Enum):
    """How often an event repeats."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: Any) -> "RecurrenceType":
        """Parse a stored or imported recurrence value.

        Unknown values fall back to NONE so a bad record still renders as a
        single event.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        logger.debug("Unrecognized recurrence %r, treating as non-recurring", value)
        return cls.NONE

    @classmethod
    def from_ics_freq(cls, freq: Optional[str]) -> "RecurrenceType":
        """Map an RRULE FREQ value back to a recurrence type."""
        normalized = (freq or "").strip().upper()
        return _RECURRENCE_BY_FREQ.get(normalized, cls.NONE)

    @property
    def ics_freq(self) -> Optional[str]:
        """RRULE FREQ value, or None for non-recurring events."""
        return _FREQ_BY_RECURRENCE.get(self)


_FREQ_BY_RECURRENCE = {
    RecurrenceType.NONE: None,
    RecurrenceType.DAILY: "DAILY",
    RecurrenceType.WEEKLY: "WEEKLY",
    RecurrenceType.MONTHLY: "MONTHLY",
    RecurrenceType.YEARLY: "YEARLY",
}
_RECURRENCE_BY_FREQ = {
    freq: recurrence for recurrence, freq in _FREQ_BY_RECURRENCE.items() if freq is not None
}


class EventType(str, Enum):
    """Kind of calendar entry."""

    EVENT = "event"
    TASK = "task"
    REMINDER = "reminder"
    BIRTHDAY = "birthday"

    @classmethod
    def parse(cls, value: Any) -> "EventType":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        logger.debug("Unrecognized event type %r, using 'event'", value)
        return cls.EVENT


class NotificationType(str, Enum):
    """Notification delivery channel."""

    EMAIL = "email"
    PUSH = "push"


class NotificationTimeUnit(str, Enum):
    """Unit of a notification lead time."""

    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"


class EventNotification(BaseModel):
    """Reminder attached to an event, carried through the engine unchanged."""

    id: str
    type: NotificationType = NotificationType.PUSH
    time: int = Field(default=10, ge=0, description="Amount of time before the event")
    unit: NotificationTimeUnit = NotificationTimeUnit.MINUTES
    sent: bool = False

    @property
    def offset(self) -> timedelta:
        """Lead time before the event start."""
        return timedelta(**{self.unit.value: self.time})


class CalendarEvent(BaseModel):
    """Calendar event, either a stored definition or an expanded occurrence.

    All timestamps are naive local date-times. Offsets on input are dropped
    without conversion.
    """

    # Core properties
    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    title: str = Field(..., min_length=1, description="Display title")
    description: str = Field(default="", description="Free-form notes")
    location: Optional[str] = Field(default=None, description="Event location")

    # Time information
    start: datetime = Field(..., description="Start, naive local time")
    end: datetime = Field(..., description="End, naive local time")
    all_day: bool = Field(default=False, alias="allDay", description="All-day event flag")

    # Ownership and classification
    calendar_id: str = Field(default="primary", alias="calendarId")
    type: EventType = Field(default=EventType.EVENT)

    # Recurrence
    recurrence: RecurrenceType = Field(default=RecurrenceType.NONE)
    recurrence_end: Optional[datetime] = Field(
        default=None,
        alias="recurrenceEnd",
        description="Last moment an instance may start; None recurs indefinitely",
    )

    notifications: list[EventNotification] = Field(default_factory=list)

    # Soft delete
    is_deleted: bool = Field(default=False, alias="isDeleted")
    deleted_at: Optional[datetime] = Field(default=None, alias="deletedAt")

    # Metadata
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    # Set only on expanded occurrences
    master_id: Optional[str] = Field(default=None, alias="masterId")
    instance_date: Optional[date] = Field(default=None, alias="instanceDate")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator(
        "start", "end", "recurrence_end", "deleted_at", "created_at", "updated_at", mode="before"
    )
    @classmethod
    def _promote_dates(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return start_of_day(value)
        return value

    @field_validator(
        "start", "end", "recurrence_end", "deleted_at", "created_at", "updated_at"
    )
    @classmethod
    def _drop_offset(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive(value) if value is not None else None

    @field_validator("recurrence", mode="before")
    @classmethod
    def _parse_recurrence(cls, value: Any) -> RecurrenceType:
        return RecurrenceType.parse(value)

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> EventType:
        return EventType.parse(value)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="after")
    def _check_times(self) -> "CalendarEvent":
        if self.all_day:
            self.start = start_of_day(self.start)
            self.end = start_of_day(self.end)
        if self.end < self.start:
            raise ValueError(f"Event {self.id!r} ends before it starts")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not RecurrenceType.NONE

    @property
    def is_occurrence(self) -> bool:
        return self.master_id is not None

    @property
    def occurrence_key(self) -> tuple[str, Optional[date]]:
        """Structured identity: (base event id, instance date or None)."""
        return (self.master_id or self.id, self.instance_date)

    def overlaps(self, range_start: datetime, range_end: datetime) -> bool:
        """Inclusive overlap of [start, end] with [range_start, range_end]."""
        return self.start <= range_end and self.end >= range_start

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase field names the front end uses."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AgendaGroup(BaseModel):
    """Events starting on one day of the agenda view."""

    day: date
    label: str
    events: list[CalendarEvent] = Field(default_factory=list)
