"""
Timeline creation and ordered insertion.

A timeline file starts with an epoch record and holds entry records sorted
by timestamp. Insertion finds its position with a linear scan and rewrites
the file through a temporary sibling that atomically replaces the original.
"""

import os
import stat
import tempfile
import time
from pathlib import Path
from typing import Optional, Union

from daysum.core.errors import TimelineIOError, ValidationError
from daysum.core.timeline.format import EntryRecord, serialize_epoch
from daysum.core.timeline.reader import TimelineReader
from daysum.utils.logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def create_timeline(path: PathLike, timestamp: Optional[int] = None) -> int:
    """
    Create a new timeline holding only its epoch record.

    Any existing file at ``path`` is truncated.

    Args:
        path: Where to create the timeline
        timestamp: Epoch in Unix seconds, defaults to now

    Returns:
        The epoch timestamp written

    Raises:
        TimelineIOError: If the file cannot be created or written
        ValidationError: If ``timestamp`` does not fit the epoch field
    """
    if timestamp is None:
        timestamp = int(time.time())

    path = Path(path)
    epoch = serialize_epoch(timestamp)
    try:
        with open(path, "wb") as f:
            f.write(epoch)
    except OSError as e:
        raise TimelineIOError(f"Cannot create timeline {path}: {e}") from e

    logger.info("Created timeline", path=str(path), epoch=timestamp)

    return timestamp


def find_insertion_point(reader: TimelineReader, timestamp: int) -> int:
    """
    Locate where an entry with ``timestamp`` belongs.

    The new entry goes before the first entry whose timestamp is greater
    than or equal to it, so entries sharing a timestamp end up in reverse
    insertion order.

    Args:
        reader: Open reader on the timeline
        timestamp: Timestamp of the entry to insert

    Returns:
        Byte offset of the insertion point
    """
    for position, existing, _label_length in reader.read_headers():
        if existing >= timestamp:
            return position
    return reader.end_position()


def insert_entry(path: PathLike, label: str, timestamp: Optional[int] = None) -> int:
    """
    Insert a labelled entry, keeping the timeline sorted.

    Args:
        path: Existing timeline file
        label: Label text
        timestamp: Entry time in Unix seconds, defaults to now

    Returns:
        Byte offset at which the entry was written

    Raises:
        TimelineIOError: If the timeline cannot be read or rewritten
        ValidationError: If ``timestamp`` is not after the epoch, does not
            fit its field, or ``label`` cannot be encoded as UTF-8
    """
    if timestamp is None:
        timestamp = int(time.time())

    # Rewrite the link target, not the link.
    path = Path(path).resolve()
    record = EntryRecord(timestamp=timestamp, label=label)

    with TimelineReader(path) as reader:
        epoch = reader.read_epoch()
        if timestamp <= epoch:
            raise ValidationError(
                f"Timestamp {timestamp} not after epoch {epoch} of {path}"
            )

        position = find_insertion_point(reader, timestamp)
        head = reader.read_range(0, position)
        tail = reader.read_range(position)

    _replace_contents(path, head + record.serialize() + tail)

    logger.info(
        "Inserted entry",
        path=str(path),
        timestamp=timestamp,
        label=label,
        offset=position,
        tail_bytes=len(tail),
    )

    return position


def _replace_contents(path: Path, data: bytes) -> None:
    """
    Atomically replace a file's contents.

    Writes to a temporary file in the same directory, fsyncs it, carries
    over the original permissions and renames it over ``path``.

    Raises:
        TimelineIOError: If any step fails; the original is left untouched
    """
    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
    except OSError as e:
        raise TimelineIOError(f"Cannot stage rewrite of {path}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error("Failed to rewrite timeline", path=str(path), error=str(e))
        tmp_path.unlink(missing_ok=True)
        raise TimelineIOError(f"Cannot rewrite timeline {path}: {e}") from e

    logger.debug("Replaced timeline contents", path=str(path), size=len(data))
