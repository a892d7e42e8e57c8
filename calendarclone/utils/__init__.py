"""Utility functions and helpers package."""

from .clock import Clock, as_naive, end_of_day, now_local, now_utc, start_of_day, to_datetime
from .logging import get_log_level, setup_logging

__all__ = [
    "Clock",
    "as_naive",
    "end_of_day",
    "get_log_level",
    "now_local",
    "now_utc",
    "setup_logging",
    "start_of_day",
    "to_datetime",
]
