"""Data models for ICS import results."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..events.models import CalendarEvent


class ICSParseResult(BaseModel):
    """Result of an ICS import."""

    events: list[CalendarEvent] = Field(default_factory=list, description="Decoded events")
    calendar_id: str = Field(..., description="Calendar every decoded event was assigned to")
    calendar_name: Optional[str] = None

    # Parse statistics
    total_components: int = Field(default=0, description="VEVENT blocks encountered")
    event_count: int = 0
    skipped_count: int = Field(default=0, description="Blocks dropped as incomplete or invalid")
    recurring_event_count: int = 0
    ignored_line_count: int = Field(default=0, description="Unparsable content lines")

    # Parsing metadata
    parse_time: datetime = Field(..., description="Clock reading when the import ran")
    ics_version: Optional[str] = None
    prodid: Optional[str] = None
