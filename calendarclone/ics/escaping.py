"""RFC 5545 TEXT value escaping."""

import re

_ESCAPE_SEQUENCE = re.compile(r"\\([\\;,nN])")
_LINE_BREAK = re.compile(r"\r\n?")
_UNESCAPED = {"\\": "\\", ";": ";", ",": ",", "n": "\n", "N": "\n"}


def escape_text(text: str) -> str:
    """Escape a TEXT value for an ICS content line.

    Order matters: backslashes are escaped before the characters that
    introduce new backslashes. CRLF and bare CR count as a newline.
    """
    return (
        _LINE_BREAK.sub("\n", text)
        .replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def unescape_text(text: str) -> str:
    """Inverse of :func:`escape_text`.

    Done in a single left-to-right pass so an escaped backslash followed by
    ``n`` stays a literal backslash and ``n`` instead of becoming a newline.
    Unknown escape sequences are kept verbatim.
    """
    return _ESCAPE_SEQUENCE.sub(lambda match: _UNESCAPED[match.group(1)], text)
