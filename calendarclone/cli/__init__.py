"""CLI module for Calendar Clone.

Parses arguments, loads settings, configures logging and dispatches to the
command functions in :mod:`calendarclone.cli.commands`.
"""

import logging
from collections.abc import Sequence
from typing import Optional

from ..config.settings import CalendarCloneSettings
from ..ics.exceptions import CalendarCloneError
from ..utils.clock import Clock
from ..utils.logging import setup_logging
from .commands import (
    COMMANDS,
    load_events,
    read_ics_file,
    run_agenda,
    run_expand,
    run_export,
    run_import,
    write_output,
)
from .parser import create_parser, parse_date

logger = logging.getLogger(__name__)


def main_entry(argv: Optional[Sequence[str]] = None, clock: Optional[Clock] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``
        clock: Clock override for the commands, used by tests

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = CalendarCloneSettings(config_file=args.config)
    if args.log_level:
        settings.log_level = args.log_level
    setup_logging(settings.log_level, log_file=settings.log_file)

    command = COMMANDS[args.command]
    try:
        return command(args, settings, clock)
    except CalendarCloneError as e:
        if e.source:
            logger.error("%s: %s", e.source, e.message)
        else:
            logger.error("%s", e.message)
        return 1


__all__ = [
    "create_parser",
    "load_events",
    "main_entry",
    "parse_date",
    "read_ics_file",
    "run_agenda",
    "run_expand",
    "run_export",
    "run_import",
    "write_output",
]
