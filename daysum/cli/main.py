#!/usr/bin/env python3
"""
Main entry point for the daysum command.

Usage:
    # Start a new timeline now, or at a given local time
    daysum --new work.log
    daysum --new work.log "18.10.2026 08:00"

    # Record that the time since the previous checkpoint went to a label
    daysum work.log coding
    daysum work.log lunch "18.10.2026 12:30"

    # Summaries
    daysum --sum work.log
    daysum --sumv work.log
"""

import argparse
import sys
from typing import List, Optional

import yaml

from daysum.core.errors import TimelineError, UsageError
from daysum.core.timeline.summary import SUMMARY_ORDERS, format_summary, summarize
from daysum.core.timeline.timeline import create_timeline, insert_entry
from daysum.utils.config import Config
from daysum.utils.dates import current_timestamp, parse_local_datetime
from daysum.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

INVALID_USAGE = "Invalid usage, type --help for instructions"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")

OPTION_FLAGS = ("-h", "--help", "--new", "--sum", "--sumv", "--config", "--log-level")

USAGE = """daysum <filename> <label> [date]
       daysum --new <filename> [date]
       daysum {--sum | --sumv} <filename>"""

EPILOG = """subcommands:
  <filename> <label> [date]    add entry <label> to file, default date is current time
  --new <filename> [date]      create new file, initial timestamp is [date] if provided
  {--sum | --sumv} <filename>  dump summary, optional verbose (sumv)

date is of format "DD.MM.YYYY hh:mm" in local time"""


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="daysum",
        usage=USAGE,
        description="daysum - record labelled checkpoints and sum up time per label",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )

    commands = parser.add_mutually_exclusive_group()
    commands.add_argument(
        "--new",
        metavar="FILENAME",
        help="create a new timeline",
    )
    commands.add_argument(
        "--sum",
        metavar="FILENAME",
        help="print a summary",
    )
    commands.add_argument(
        "--sumv",
        metavar="FILENAME",
        help="print a summary listing every entry",
    )

    parser.add_argument(
        "args",
        nargs="*",
        metavar="ARG",
        help=argparse.SUPPRESS,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, WARNING)",
    )

    return parser


def split_argv(argv: List[str]) -> List[str]:
    """
    Stop option parsing for the insert form.

    When the first argument is not a daysum option, everything is taken
    literally, so paths and labels may start with a dash.
    """
    if argv and argv[0] != "--" and argv[0].split("=", 1)[0] not in OPTION_FLAGS:
        return ["--", *argv]
    return argv


def check_config(config: Config) -> None:
    """
    Reject configuration values the commands cannot use.

    Raises:
        UsageError: If a value is unknown or has the wrong type
    """
    level = config.get("logging.level")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise UsageError(
            f"Unknown logging.level {level!r}, expected one of {', '.join(LOG_LEVELS)}"
        )

    log_format = config.get("logging.format")
    if log_format not in LOG_FORMATS:
        raise UsageError(
            f"Unknown logging.format {log_format!r}, expected one of {', '.join(LOG_FORMATS)}"
        )

    if not isinstance(config.get("logging.output"), str):
        raise UsageError("logging.output must be stdout, stderr or a file path")

    order = config.get("summary.order")
    if order not in SUMMARY_ORDERS:
        raise UsageError(
            f"Unknown summary order {order!r}, expected one of {', '.join(SUMMARY_ORDERS)}"
        )

    width = config.get("summary.label_width")
    if isinstance(width, bool) or not isinstance(width, int) or width < 0:
        raise UsageError(f"summary.label_width must be a non-negative integer, got {width!r}")

    if not isinstance(config.get("dates.input_format"), str):
        raise UsageError("dates.input_format must be a string")


def _resolve_timestamp(date: Optional[str], input_format: str) -> int:
    if date is None:
        return current_timestamp()
    return parse_local_datetime(date, input_format)


def run(args: argparse.Namespace, config: Config) -> None:
    """
    Dispatch parsed arguments to the matching timeline operation.

    Raises:
        UsageError: If the argument count does not fit the command
        TimelineError: If the operation itself fails
    """
    input_format = config.get("dates.input_format")
    extra = args.args

    if args.new is not None:
        if len(extra) > 1:
            raise UsageError(INVALID_USAGE)
        date = extra[0] if extra else None
        create_timeline(args.new, _resolve_timestamp(date, input_format))

    elif args.sum is not None or args.sumv is not None:
        if extra:
            raise UsageError(INVALID_USAGE)

        verbose = args.sumv is not None
        summary = summarize(args.sumv if verbose else args.sum)
        for line in format_summary(
            summary,
            verbose=verbose,
            order=config.get("summary.order"),
            label_width=config.get("summary.label_width"),
        ):
            print(line)

    else:
        if len(extra) not in (2, 3):
            raise UsageError(INVALID_USAGE)
        path, label = extra[0], extra[1]
        date = extra[2] if len(extra) == 3 else None
        insert_entry(path, label, _resolve_timestamp(date, input_format))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(split_argv(list(argv)))

    try:
        config = Config(args.config)
    except (OSError, yaml.YAMLError) as e:
        print(f"error: cannot load configuration: {e}", file=sys.stderr)
        return UsageError.exit_code

    try:
        check_config(config)
    except UsageError as e:
        print(f"error: {e}", file=sys.stderr)
        return e.exit_code

    configure_logging(
        log_level=args.log_level or config.get("logging.level"),
        log_format=config.get("logging.format"),
        log_output=config.get("logging.output"),
    )

    try:
        run(args, config)
    except TimelineError as e:
        logger.debug("Command failed", kind=type(e).__name__, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return e.exit_code

    return 0


if __name__ == '__main__':
    sys.exit(main())
