"""Command-line argument parsing for Calendar Clone."""

import argparse
from datetime import date, datetime
from pathlib import Path

from .. import __version__

LOG_LEVELS = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_date(date_str: str) -> date:
    """Parse a YYYY-MM-DD command-line date.

    Raises:
        argparse.ArgumentTypeError: If the value is not a valid date
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"Invalid date format: {date_str}. Use YYYY-MM-DD") from err


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"Not a number: {value}") from err
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the command line parser with one subcommand per operation.

    Each subparser stores its handler name in ``command``; the dispatcher in
    :mod:`calendarclone.cli` maps it to the command function.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="calendarclone",
        description="Calendar Clone - recurring event expansion and ICS import/export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s export events.json                     # Write calendario_<today>.ics
  %(prog)s import holidays.ics --calendar work    # Print imported events as JSON
  %(prog)s expand events.json --start 2024-03-01 --end 2024-03-31
  %(prog)s agenda events.json --days 14
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version information"
    )
    parser.add_argument("--config", type=Path, metavar="PATH", help="YAML configuration file")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Console log level (default: from configuration, INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    export_parser = subparsers.add_parser("export", help="Export a JSON event list as ICS")
    export_parser.add_argument("events", type=Path, help="JSON file holding a list of events")
    export_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file, '-' for stdout (default: calendario_YYYY-MM-DD.ics)",
    )

    import_parser = subparsers.add_parser("import", help="Import an ICS file as a JSON event list")
    import_parser.add_argument("ics_file", type=Path, help="ICS file to import")
    import_parser.add_argument(
        "--calendar", dest="calendar_id", metavar="ID", help="Calendar receiving the events"
    )
    import_parser.add_argument("-o", "--output", metavar="FILE", help="Output file (default: stdout)")

    expand_parser = subparsers.add_parser("expand", help="List occurrences inside a date range")
    expand_parser.add_argument("events", type=Path, help="JSON file holding a list of events")
    expand_parser.add_argument("--start", type=parse_date, required=True, help="First day (YYYY-MM-DD)")
    expand_parser.add_argument("--end", type=parse_date, required=True, help="Last day (YYYY-MM-DD)")
    expand_parser.add_argument("-o", "--output", metavar="FILE", help="Output file (default: stdout)")

    agenda_parser = subparsers.add_parser("agenda", help="Print upcoming events grouped by day")
    agenda_parser.add_argument("events", type=Path, help="JSON file holding a list of events")
    agenda_parser.add_argument("--start", type=parse_date, help="First day (default: today)")
    agenda_parser.add_argument(
        "--days", type=_positive_int, help="Number of days to show (default: from configuration)"
    )
    agenda_parser.add_argument(
        "--calendar",
        dest="calendar_ids",
        action="append",
        metavar="ID",
        help="Only show this calendar; repeat for several",
    )

    return parser


__all__ = ["LOG_LEVELS", "create_parser", "parse_date"]
