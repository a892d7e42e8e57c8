"""ICS import and export."""

from .escaping import escape_text, unescape_text
from .exceptions import CalendarCloneError, EventDataError, ICSContentTooLargeError, ICSError
from .exporter import ICSExporter, encode, export_filename
from .models import ICSParseResult
from .parser import ICSParser, decode

__all__ = [
    "CalendarCloneError",
    "EventDataError",
    "ICSContentTooLargeError",
    "ICSError",
    "ICSExporter",
    "ICSParseResult",
    "ICSParser",
    "decode",
    "encode",
    "escape_text",
    "export_filename",
    "unescape_text",
]
