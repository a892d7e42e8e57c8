"""Command implementations: file I/O around the engine.

Everything that touches the filesystem lives here. Failures a user can fix
(missing file, bad JSON, oversized ICS) are raised as CalendarCloneError
subclasses and turned into exit code 1 by the dispatcher.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..config.settings import CalendarCloneSettings
from ..events.models import CalendarEvent
from ..events.rrule_expander import RRuleExpander
from ..events.views import group_events_by_date, sort_for_display
from ..ics.exceptions import EventDataError, ICSContentTooLargeError, ICSError
from ..ics.exporter import ICSExporter, export_filename
from ..ics.parser import ICSParser
from ..utils.clock import Clock, now_local, now_utc

logger = logging.getLogger(__name__)

STDOUT = "-"


def load_events(path: Path) -> list[CalendarEvent]:
    """Read a JSON list of events (camelCase or snake_case keys).

    Raises:
        EventDataError: If the file can't be read, isn't a JSON list, or an
            entry fails validation
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise EventDataError(f"Cannot read event file: {e}", source=str(path)) from e
    except json.JSONDecodeError as e:
        raise EventDataError(f"Invalid JSON in event file: {e}", source=str(path)) from e

    if not isinstance(raw, list):
        raise EventDataError("Event file must contain a JSON list", source=str(path))

    events = []
    for index, item in enumerate(raw):
        try:
            events.append(CalendarEvent.model_validate(item))
        except ValidationError as e:
            raise EventDataError(f"Invalid event at index {index}: {e}", source=str(path)) from e

    logger.debug("Loaded %d event(s) from %s", len(events), path)
    return events


def read_ics_file(path: Path, max_size: int) -> str:
    """Read an ICS file, refusing files larger than ``max_size`` bytes.

    Raises:
        ICSContentTooLargeError: If the file exceeds ``max_size``
        ICSError: If the file can't be read
    """
    try:
        size = path.stat().st_size
        if size > max_size:
            raise ICSContentTooLargeError(
                f"ICS file is {size} bytes, limit is {max_size}", source=str(path)
            )
        # Some exporters write Latin-1 text; never fail on decoding
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ICSError(f"Cannot read ICS file: {e}", source=str(path)) from e


def write_output(text: str, output: Optional[str]) -> None:
    """Write to a file, or stdout for None and ``-``."""
    if output is None or output == STDOUT:
        sys.stdout.write(text)
        return
    try:
        # ICS text carries its own CRLFs; don't let the platform translate them
        with open(output, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise EventDataError(f"Cannot write output: {e}", source=output) from e
    logger.info("Wrote %s", output)


def _events_json(events: list[CalendarEvent]) -> str:
    return json.dumps([event.to_json_dict() for event in events], indent=2, ensure_ascii=False) + "\n"


def run_export(
    args: argparse.Namespace, settings: CalendarCloneSettings, clock: Optional[Clock] = None
) -> int:
    events = load_events(args.events)
    clock = clock or now_utc
    text = ICSExporter(settings, clock=clock).export(events)
    output = args.output or export_filename(clock)
    write_output(text, output)
    return 0


def run_import(
    args: argparse.Namespace, settings: CalendarCloneSettings, clock: Optional[Clock] = None
) -> int:
    text = read_ics_file(args.ics_file, settings.max_ics_size_bytes)
    result = ICSParser(settings, clock=clock).parse(text, args.calendar_id)
    write_output(_events_json(result.events), args.output)

    summary = f"Imported {result.event_count} event(s) into '{result.calendar_id}'"
    if result.skipped_count:
        summary += f", skipped {result.skipped_count} incomplete"
    print(summary, file=sys.stderr)
    return 0


def run_expand(
    args: argparse.Namespace, settings: CalendarCloneSettings, clock: Optional[Clock] = None
) -> int:
    if args.start > args.end:
        raise EventDataError(f"--start {args.start} is after --end {args.end}")
    events = [event for event in load_events(args.events) if not event.is_deleted]
    occurrences = RRuleExpander(settings).expand_all(events, args.start, args.end)
    write_output(_events_json(sort_for_display(occurrences)), args.output)
    return 0


def _format_agenda_line(event: CalendarEvent) -> str:
    when = "all day" if event.all_day else f"{event.start:%H:%M}-{event.end:%H:%M}"
    line = f"  {when:<12} {event.title}"
    if event.location:
        line += f" @ {event.location}"
    return line


def run_agenda(
    args: argparse.Namespace, settings: CalendarCloneSettings, clock: Optional[Clock] = None
) -> int:
    events = load_events(args.events)
    today = (clock or now_local)().date()
    groups = group_events_by_date(
        events,
        args.start or today,
        args.days or settings.agenda_days,
        visible_calendar_ids=args.calendar_ids,
        today=today,
        expander=RRuleExpander(settings),
    )

    if not groups:
        print("No upcoming events")
        return 0

    lines: list[str] = []
    for group in groups:
        lines.append(f"{group.label} ({group.day.isoformat()})")
        lines.extend(_format_agenda_line(event) for event in group.events)
    print("\n".join(lines))
    return 0


COMMANDS = {
    "export": run_export,
    "import": run_import,
    "expand": run_expand,
    "agenda": run_agenda,
}
