"""Clock and naive date helpers.

The engine works on naive local date-times. Everything that needs "now"
takes a clock callable so tests can pin time without patching the system.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Union

Clock = Callable[[], datetime]
DateLike = Union[date, datetime]


def now_utc() -> datetime:
    """Current time in UTC with tzinfo."""
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    """Current naive local time."""
    return datetime.now()


def as_naive(value: datetime) -> datetime:
    """Drop tzinfo, keeping the wall-clock fields as written.

    An offset is accepted but never applied.
    """
    if value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def to_datetime(value: DateLike) -> datetime:
    """Promote a date to a naive midnight datetime; naive-ify datetimes."""
    if isinstance(value, datetime):
        return as_naive(value)
    return datetime.combine(value, time.min)


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(to_datetime(value).date(), time.min)


def end_of_day(value: DateLike) -> datetime:
    return datetime.combine(to_datetime(value).date(), time.max)


def utc_stamp(clock: Clock) -> datetime:
    """Read the clock and express the result in UTC.

    Naive clock values are taken to already be UTC.
    """
    value = clock()
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def day_range(start: DateLike, days: int) -> list[date]:
    """Consecutive calendar days beginning at ``start``."""
    first = to_datetime(start).date()
    return [first + timedelta(days=offset) for offset in range(max(days, 0))]
