"""
Error taxonomy for timeline operations.

Every error carries the process exit code the CLI reports for it.
"""


class TimelineError(Exception):
    """Base class for all timeline failures."""

    exit_code = 1


class TimelineIOError(TimelineError, IOError):
    """The timeline file could not be opened, read or written, or is truncated."""

    exit_code = 1


class UsageError(TimelineError, ValueError):
    """Command-line arguments are malformed."""

    exit_code = 2


class ValidationError(TimelineError, ValueError):
    """An inserted timestamp is not after the timeline epoch."""

    exit_code = 3


class FormatError(TimelineError, ValueError):
    """A stored label is not valid UTF-8."""

    exit_code = 4
