"""Exceptions raised at the I/O edges of the calendar engine.

The expander and the ICS codec themselves never raise for bad content; these
are for the callers that read files and event lists.
"""

from typing import Optional


class CalendarCloneError(Exception):
    """Base exception for calendar engine errors."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source


class ICSError(CalendarCloneError):
    """Base exception for ICS-related errors."""


class ICSContentTooLargeError(ICSError):
    """Raised when ICS content exceeds the configured size limit."""


class EventDataError(CalendarCloneError):
    """Raised when an event list cannot be read or validated."""
