"""
Record format structures for timeline files.

This module defines the binary layout of the epoch record and of entry
records, including serialization and deserialization.
"""

import struct
from dataclasses import dataclass

from daysum.core.errors import FormatError, TimelineIOError, ValidationError

TIMESTAMP_FORMAT = "<q"
LENGTH_FORMAT = "<I"

TIMESTAMP_SIZE = struct.calcsize(TIMESTAMP_FORMAT)
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)
EPOCH_SIZE = TIMESTAMP_SIZE

MAX_LABEL_BYTES = 2**32 - 1
MIN_TIMESTAMP = -(2**63)
MAX_TIMESTAMP = 2**63 - 1


def check_timestamp(timestamp: int) -> None:
    """
    Ensure a timestamp fits the signed 8-byte field.

    Raises:
        ValidationError: If the value is out of range
    """
    if not MIN_TIMESTAMP <= timestamp <= MAX_TIMESTAMP:
        raise ValidationError(f"Timestamp {timestamp} out of range for an 8-byte field")


def encode_timestamp(timestamp: int) -> bytes:
    """Encode a Unix timestamp as a fixed-width record field."""
    return struct.pack(TIMESTAMP_FORMAT, timestamp)


def decode_timestamp(data: bytes) -> int:
    """Decode a timestamp field; ``data`` must be exactly ``TIMESTAMP_SIZE`` bytes."""
    return struct.unpack(TIMESTAMP_FORMAT, data)[0]


def serialize_epoch(timestamp: int) -> bytes:
    """
    Serialize the epoch record that opens every timeline file.

    Args:
        timestamp: Creation time in Unix seconds

    Returns:
        Serialized epoch record

    Raises:
        ValidationError: If the timestamp does not fit the field
    """
    check_timestamp(timestamp)
    return encode_timestamp(timestamp)


def deserialize_epoch(data: bytes) -> int:
    """
    Read the epoch timestamp from the start of a timeline file.

    Args:
        data: File contents, or at least its first ``EPOCH_SIZE`` bytes

    Returns:
        Epoch timestamp in Unix seconds

    Raises:
        TimelineIOError: If data is too short to hold an epoch record
    """
    if len(data) < EPOCH_SIZE:
        raise TimelineIOError(
            f"Timeline too short for epoch record: {len(data)} bytes, "
            f"expected at least {EPOCH_SIZE}"
        )
    return decode_timestamp(data[:EPOCH_SIZE])


@dataclass
class EntryRecord:
    """
    A single labelled checkpoint in the timeline.

    Wire format:
        Timestamp (8 bytes) - Unix seconds, little-endian signed
        Label length (4 bytes) - Byte length of label, little-endian unsigned
        Label (variable) - UTF-8 text, no terminator

    Attributes:
        timestamp: Unix timestamp in seconds
        label: Label text
    """

    timestamp: int
    label: str

    HEADER_SIZE = TIMESTAMP_SIZE + LENGTH_SIZE

    def __post_init__(self) -> None:
        """Validate record fields."""
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise TypeError(f"Timestamp must be int, got {type(self.timestamp)}")
        if not isinstance(self.label, str):
            raise TypeError(f"Label must be str, got {type(self.label)}")
        check_timestamp(self.timestamp)
        try:
            label_bytes = self.label.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError(f"Label is not valid UTF-8: {self.label!r}") from e
        if len(label_bytes) > MAX_LABEL_BYTES:
            raise ValueError("Label too long for a 4-byte length prefix")

    def serialize(self) -> bytes:
        """
        Serialize the entry to bytes.

        Returns:
            Serialized entry record
        """
        label_bytes = self.label.encode("utf-8")
        return struct.pack(
            f"{TIMESTAMP_FORMAT}I{len(label_bytes)}s",
            self.timestamp,
            len(label_bytes),
            label_bytes,
        )

    @classmethod
    def deserialize(cls, data: bytes) -> "EntryRecord":
        """
        Deserialize an entry from bytes.

        Args:
            data: Serialized entry, possibly followed by further records

        Returns:
            Deserialized EntryRecord

        Raises:
            TimelineIOError: If data is shorter than the record it describes
            FormatError: If the label is not valid UTF-8
        """
        if len(data) < cls.HEADER_SIZE:
            raise TimelineIOError(f"Entry header truncated: {len(data)} bytes")

        timestamp, label_length = struct.unpack(
            f"{TIMESTAMP_FORMAT}I", data[: cls.HEADER_SIZE]
        )
        label_bytes = data[cls.HEADER_SIZE : cls.HEADER_SIZE + label_length]

        if len(label_bytes) != label_length:
            raise TimelineIOError(
                f"Label truncated: expected {label_length} bytes, got {len(label_bytes)}"
            )

        return cls(timestamp=timestamp, label=decode_label(label_bytes))

    def size(self) -> int:
        """
        Calculate the serialized size of this entry.

        Returns:
            Size in bytes
        """
        return self.HEADER_SIZE + len(self.label.encode("utf-8"))


def decode_label(label_bytes: bytes) -> str:
    """
    Decode stored label bytes.

    Raises:
        FormatError: If the bytes are not valid UTF-8
    """
    try:
        return label_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Label is not valid UTF-8: {label_bytes!r}") from e
