"""Tests for per-label duration summaries."""

import struct
import tempfile
from email.utils import parsedate_to_datetime
from pathlib import Path

import pytest

from daysum.core.errors import FormatError, TimelineIOError
from daysum.core.timeline.summary import (
    Summary,
    format_duration,
    format_summary,
    ordered_labels,
    summarize,
)
from daysum.core.timeline.timeline import create_timeline, insert_entry


class TestFormatDuration:
    """Test HH:MM rendering."""

    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "00:00"),
            (59, "00:00"),
            (60, "00:01"),
            (3599, "00:59"),
            (5400, "01:30"),
            (36000 * 12, "120:00"),
        ],
    )
    def test_format_duration(self, seconds, expected):
        """Test seconds are truncated, not rounded."""
        assert format_duration(seconds) == expected


class TestSummarize:
    """Test summarize over timeline files."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def workday(self, temp_dir):
        """Timeline: epoch 0, work until 3600, break until 5400."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        insert_entry(path, "work", 3600)
        insert_entry(path, "break", 5400)
        return path

    def test_empty_timeline(self, temp_dir):
        """Test a timeline holding only its epoch."""
        path = temp_dir / "day.log"
        create_timeline(path, 1000)

        summary = summarize(path)

        assert summary.first_timestamp == 1000
        assert summary.elapsed == 0
        assert summary.totals == {}
        assert summary.entries == []

    def test_duration_goes_to_later_label(self, workday):
        """Test each interval is credited to the label that closes it."""
        summary = summarize(workday)

        assert summary.elapsed == 5400
        assert summary.totals == {"work": 3600, "break": 1800}

    def test_percentages(self, workday):
        """Test each label's share of elapsed time."""
        summary = summarize(workday)

        assert summary.percentage("work") == pytest.approx(66.666, abs=0.01)
        assert summary.percentage("break") == pytest.approx(33.333, abs=0.01)

    def test_repeated_labels_accumulate(self, temp_dir):
        """Test identical labels sum into one total."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        insert_entry(path, "work", 600)
        insert_entry(path, "coffee", 900)
        insert_entry(path, "work", 2700)

        summary = summarize(path)

        assert summary.totals == {"work": 600 + 1800, "coffee": 300}
        assert len(summary.entries) == 3

    def test_equal_timestamps_give_zero_duration(self, temp_dir):
        """Test that a tied entry closes an empty interval."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        insert_entry(path, "A", 100)
        insert_entry(path, "B", 100)

        summary = summarize(path)

        assert summary.totals == {"B": 100, "A": 0}

    def test_missing_file_raises(self, temp_dir):
        """Test summarizing a timeline that does not exist."""
        with pytest.raises(TimelineIOError):
            summarize(temp_dir / "missing.log")

    def test_short_file_raises(self, temp_dir):
        """Test that a truncated epoch is not read as zero."""
        path = temp_dir / "short.log"
        path.write_bytes(b"\x00" * 7)

        with pytest.raises(TimelineIOError):
            summarize(path)

    def test_invalid_label_raises_format_error(self, temp_dir):
        """Test that an undecodable label fails the summary."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        with open(path, "ab") as f:
            f.write(struct.pack("<qI", 10, 2) + b"\xc3\x28")

        with pytest.raises(FormatError):
            summarize(path)


class TestOrderedLabels:
    """Test report ordering."""

    @pytest.fixture
    def summary(self):
        """Summary with a tie on duration."""
        return Summary(
            first_timestamp=0,
            last_timestamp=600,
            totals={"zeta": 100, "alpha": 300, "mid": 100, "beta": 100},
        )

    def test_duration_order(self, summary):
        """Test longest first, ties broken alphabetically."""
        assert ordered_labels(summary, "duration") == ["alpha", "beta", "mid", "zeta"]

    def test_label_order(self, summary):
        """Test alphabetical order."""
        assert ordered_labels(summary, "label") == ["alpha", "beta", "mid", "zeta"]

    def test_first_seen_order(self, summary):
        """Test file order of first appearance."""
        assert ordered_labels(summary, "first-seen") == ["zeta", "alpha", "mid", "beta"]

    def test_unknown_order(self, summary):
        """Test an unknown order is rejected."""
        with pytest.raises(ValueError, match="Unknown summary order"):
            ordered_labels(summary, "random")


class TestFormatSummary:
    """Test report rendering."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for tests."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_empty_report(self, temp_dir):
        """Test an epoch-only timeline prints a zero total and no labels."""
        path = temp_dir / "day.log"
        create_timeline(path, 1700000000)

        lines = format_summary(summarize(path))

        assert len(lines) == 2
        assert parsedate_to_datetime(lines[0]).timestamp() == 1700000000
        assert lines[1] == "Total: 00:00h"

    def test_report_lines(self, temp_dir):
        """Test total and per-label lines."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        insert_entry(path, "work", 3600)
        insert_entry(path, "break", 5400)

        lines = format_summary(summarize(path))

        assert lines[1:] == [
            "Total: 01:30h",
            f"{'work':<16}: 01:00h, 66.7%",
            f"{'break':<16}: 00:30h, 33.3%",
        ]

    def test_verbose_lists_entries(self, temp_dir):
        """Test verbose output shows each entry's own timestamp."""
        path = temp_dir / "day.log"
        create_timeline(path, 1700000000)
        insert_entry(path, "work", 1700003600)
        insert_entry(path, "break", 1700005400)

        lines = format_summary(summarize(path), verbose=True)

        assert lines[1] == "Entries:"
        stamp, label = lines[2].rsplit(": ", 1)
        assert label == "work"
        assert parsedate_to_datetime(stamp).timestamp() == 1700003600
        assert lines[3].endswith(": break")
        assert lines[4] == "Total: 01:30h"

    def test_label_width(self, temp_dir):
        """Test the label column width is configurable."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        insert_entry(path, "work", 60)

        lines = format_summary(summarize(path), label_width=6)

        assert lines[-1] == "work  : 00:01h, 100.0%"

    def test_long_labels_are_not_cut(self, temp_dir):
        """Test labels wider than the column are printed in full."""
        path = temp_dir / "day.log"
        create_timeline(path, 0)
        insert_entry(path, "a-rather-long-label-name", 60)

        lines = format_summary(summarize(path))

        assert lines[-1] == "a-rather-long-label-name: 00:01h, 100.0%"
