"""
Timeline file storage.

This package provides the timeline file with:
- Fixed-width little-endian record format
- Ordered insertion with atomic file replacement
- Sequential reads and per-label duration summaries
"""

from daysum.core.timeline.format import EntryRecord
from daysum.core.timeline.reader import TimelineReader
from daysum.core.timeline.summary import Summary, format_summary, summarize
from daysum.core.timeline.timeline import create_timeline, insert_entry

__all__ = [
    "EntryRecord",
    "TimelineReader",
    "Summary",
    "create_timeline",
    "format_summary",
    "insert_entry",
    "summarize",
]
