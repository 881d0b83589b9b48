"""
Duration summaries over a timeline.

The time between two consecutive checkpoints is attributed to the label
stored on the later checkpoint: a label names the stretch of time that
ended when it was recorded.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

from daysum.core.timeline.format import EntryRecord
from daysum.core.timeline.reader import TimelineReader
from daysum.utils.dates import format_rfc2822
from daysum.utils.logging import get_logger

logger = get_logger(__name__)

SUMMARY_ORDERS = ("duration", "label", "first-seen")


@dataclass
class Summary:
    """
    Accumulated durations for one timeline.

    Attributes:
        first_timestamp: Epoch of the timeline
        last_timestamp: Timestamp of the final entry, or the epoch if none
        entries: Entries in file order
        totals: Seconds per label, in order of first appearance
    """

    first_timestamp: int
    last_timestamp: int
    entries: List[EntryRecord] = field(default_factory=list)
    totals: Dict[str, int] = field(default_factory=dict)

    @property
    def elapsed(self) -> int:
        """Seconds from the epoch to the last entry."""
        return self.last_timestamp - self.first_timestamp

    def percentage(self, label: str) -> float:
        """Share of the elapsed time spent on ``label``, 0.0 for an empty timeline."""
        if self.elapsed == 0:
            return 0.0
        return self.totals[label] / self.elapsed * 100


def summarize(path: Union[str, Path]) -> Summary:
    """
    Scan a timeline and accumulate time per label.

    Args:
        path: Timeline file

    Returns:
        The computed summary

    Raises:
        TimelineIOError: If the file is missing, too short or truncated
        FormatError: If a label is not valid UTF-8
    """
    with TimelineReader(Path(path)) as reader:
        first = reader.read_epoch()
        summary = Summary(first_timestamp=first, last_timestamp=first)

        prev = first
        for entry in reader.read_all():
            delta = entry.timestamp - prev
            summary.totals[entry.label] = summary.totals.get(entry.label, 0) + delta
            summary.entries.append(entry)
            prev = entry.timestamp

        summary.last_timestamp = prev

    logger.debug(
        "Summarized timeline",
        path=str(path),
        entries=len(summary.entries),
        labels=len(summary.totals),
        elapsed=summary.elapsed,
    )

    return summary


def format_duration(seconds: int) -> str:
    """Render seconds as ``HH:MM``; leftover seconds are dropped."""
    hours = seconds // 3600
    minutes = (seconds - hours * 3600) // 60
    return f"{hours:02}:{minutes:02}"


def ordered_labels(summary: Summary, order: str = "duration") -> List[str]:
    """
    List the summary's labels in report order.

    Args:
        summary: Computed summary
        order: ``duration`` (longest first, ties by label), ``label``
            (alphabetical) or ``first-seen`` (file order)

    Returns:
        Labels in the requested order

    Raises:
        ValueError: If ``order`` is unknown
    """
    if order == "duration":
        return sorted(summary.totals, key=lambda label: (-summary.totals[label], label))
    if order == "label":
        return sorted(summary.totals)
    if order == "first-seen":
        return list(summary.totals)
    raise ValueError(f"Unknown summary order {order!r}, expected one of {SUMMARY_ORDERS}")


def format_summary(
    summary: Summary,
    verbose: bool = False,
    order: str = "duration",
    label_width: int = 16,
) -> List[str]:
    """
    Render a summary as report lines.

    Args:
        summary: Computed summary
        verbose: Also list every entry with its own timestamp
        order: Label order, see ``ordered_labels``
        label_width: Minimum width the label column is padded to

    Returns:
        Lines of the report, without trailing newlines
    """
    lines = [format_rfc2822(summary.first_timestamp)]

    if verbose:
        lines.append("Entries:")
        for entry in summary.entries:
            lines.append(f"{format_rfc2822(entry.timestamp)}: {entry.label}")

    lines.append(f"Total: {format_duration(summary.elapsed)}h")

    for label in ordered_labels(summary, order):
        lines.append(
            f"{label:<{label_width}}: {format_duration(summary.totals[label])}h, "
            f"{summary.percentage(label):.1f}%"
        )

    return lines
