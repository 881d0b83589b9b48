"""
Sequential reader for timeline files.

Walks the epoch record and then every entry record in file order. A
timestamp field cut short by end-of-file marks the end of the timeline; a
length field or label cut short is reported as truncation.
"""

import os
import struct
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from daysum.core.errors import TimelineIOError
from daysum.core.timeline.format import (
    EPOCH_SIZE,
    LENGTH_FORMAT,
    LENGTH_SIZE,
    TIMESTAMP_SIZE,
    EntryRecord,
    decode_label,
    decode_timestamp,
    deserialize_epoch,
)
from daysum.utils.logging import get_logger

logger = get_logger(__name__)


class TimelineReader:
    """
    Sequential reader for a timeline file.

    Attributes:
        path: Path to the timeline file
    """

    def __init__(self, path: Path):
        """
        Initialize a timeline reader.

        Args:
            path: Path to the timeline file
        """
        self.path = Path(path)
        self._file: Optional[BinaryIO] = None
        self._size: int = 0
        self._end_position: Optional[int] = None

    def open(self) -> None:
        """
        Open the timeline file for reading.

        Raises:
            TimelineIOError: If the file cannot be opened
        """
        if self._file is not None:
            return

        try:
            self._file = open(self.path, "rb")
            self._size = os.fstat(self._file.fileno()).st_size
        except OSError as e:
            raise TimelineIOError(f"Cannot open timeline {self.path}: {e}") from e

        logger.debug("Opened timeline for reading", path=str(self.path), size=self._size)

    def close(self) -> None:
        """Close the timeline file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("Closed timeline reader", path=str(self.path))

    def end_position(self) -> int:
        """
        Byte offset just past the last complete entry.

        Only known once ``read_headers`` has run to exhaustion.

        Raises:
            ValueError: If the scan has not reached the end yet
        """
        if self._end_position is None:
            raise ValueError("Timeline has not been scanned to the end")
        return self._end_position

    def _read(self, count: int) -> bytes:
        if self._file is None:
            raise ValueError("Cannot read from closed timeline")
        try:
            return self._file.read(count)
        except OSError as e:
            raise TimelineIOError(f"Error reading timeline {self.path}: {e}") from e

    def _seek(self, position: int) -> None:
        try:
            self._file.seek(position)
        except OSError as e:
            raise TimelineIOError(f"Error seeking timeline {self.path}: {e}") from e

    def read_epoch(self) -> int:
        """
        Read the epoch timestamp.

        Returns:
            Epoch timestamp in Unix seconds

        Raises:
            TimelineIOError: If the file is shorter than an epoch record
        """
        self.open()
        self._seek(0)
        return deserialize_epoch(self._read(EPOCH_SIZE))

    def read_headers(self) -> Iterator[Tuple[int, int, int]]:
        """
        Scan entry headers without decoding labels.

        Between yields the file is left positioned at the start of the
        current label, so a caller may read it before resuming.

        Yields:
            Tuples of (record position, timestamp, label length)

        Raises:
            TimelineIOError: If a length field or label is truncated
        """
        self.open()
        self._end_position = None
        position = EPOCH_SIZE
        self._seek(position)

        while True:
            timestamp_bytes = self._read(TIMESTAMP_SIZE)

            if len(timestamp_bytes) < TIMESTAMP_SIZE:
                if timestamp_bytes:
                    logger.warning(
                        "Partial record at end of timeline",
                        path=str(self.path),
                        position=position,
                        bytes_read=len(timestamp_bytes),
                    )
                self._end_position = position
                return

            length_bytes = self._read(LENGTH_SIZE)
            if len(length_bytes) < LENGTH_SIZE:
                raise TimelineIOError(
                    f"Label length truncated at position {position} in {self.path}"
                )

            timestamp = decode_timestamp(timestamp_bytes)
            label_length = struct.unpack(LENGTH_FORMAT, length_bytes)[0]
            record_end = position + EntryRecord.HEADER_SIZE + label_length

            if record_end > self._size:
                raise TimelineIOError(
                    f"Label truncated at position {position} in {self.path}: "
                    f"expected {label_length} bytes, "
                    f"got {self._size - position - EntryRecord.HEADER_SIZE}"
                )

            yield position, timestamp, label_length

            position = record_end
            self._seek(position)

    def read_all(self) -> Iterator[EntryRecord]:
        """
        Read all entries sequentially.

        Yields:
            Entries in file order

        Raises:
            TimelineIOError: If the file is truncated mid-record
            FormatError: If a label is not valid UTF-8
        """
        for _position, timestamp, label_length in self.read_headers():
            label = decode_label(self._read(label_length))
            yield EntryRecord(timestamp=timestamp, label=label)

    def read_range(self, start: int, end: Optional[int] = None) -> bytes:
        """
        Read raw bytes between two offsets.

        Args:
            start: First byte offset
            end: Offset to stop at, or None for end-of-file

        Returns:
            The bytes in ``[start, end)``
        """
        self.open()
        self._seek(start)
        if end is None:
            return self._read(-1)
        return self._read(end - start)

    def __enter__(self) -> "TimelineReader":
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        """String representation."""
        return f"TimelineReader(path={str(self.path)!r}, size={self._size})"
