"""Date parsing and display helpers."""

import time
from datetime import datetime
from email.utils import format_datetime

from daysum.core.errors import UsageError

DEFAULT_INPUT_FORMAT = "%d.%m.%Y %H:%M"


def current_timestamp() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def parse_local_datetime(text: str, fmt: str = DEFAULT_INPUT_FORMAT) -> int:
    """
    Parse a local wall-clock date into a Unix timestamp.

    Args:
        text: Date string, e.g. ``"18.10.2026 09:30"``
        fmt: ``strptime`` format of ``text``

    Returns:
        Unix timestamp in seconds

    Raises:
        UsageError: If ``text`` does not match ``fmt``
    """
    try:
        parsed = datetime.strptime(text, fmt)
    except ValueError as e:
        raise UsageError(f"Invalid date {text!r}, expected format {fmt!r}") from e
    return int(parsed.timestamp())


def format_rfc2822(timestamp: int) -> str:
    """Render a Unix timestamp as an RFC 2822 date in the local timezone."""
    return format_datetime(datetime.fromtimestamp(timestamp).astimezone())
