"""
Tests for Slack timestamp and file name helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest

from execution_tracker.integrations.slack.parser import (
    datetime_to_slack_ts,
    derive_blob_name,
    later_ts,
    photo_source_key,
    sanitize_file_name,
    slack_ts_to_datetime,
)


class TestSlackTimestamps:
    """Test suite for ts <-> datetime conversion."""

    def test_ts_to_datetime(self):
        """Test the microsecond part is truncated to whole milliseconds."""
        assert slack_ts_to_datetime("1770000000.000100") == datetime(2026, 2, 2, 2, 40, tzinfo=timezone.utc)
        assert slack_ts_to_datetime("1770000000.123999").microsecond == 123000

    def test_ts_without_fraction(self):
        assert slack_ts_to_datetime("100") == datetime(1970, 1, 1, 0, 1, 40, tzinfo=timezone.utc)

    def test_invalid_ts(self):
        """Test that non-numeric timestamps raise ValueError."""
        for bad in ["", "abc", "1.2.3", "NaN", None]:
            with pytest.raises(ValueError):
                slack_ts_to_datetime(bad)

    def test_datetime_to_ts(self):
        value = datetime(2026, 2, 2, 2, 40, 0, 100, tzinfo=timezone.utc)
        assert datetime_to_slack_ts(value) == "1770000000.000100"

    def test_datetime_to_ts_converts_to_utc(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        assert datetime_to_slack_ts(datetime(2026, 2, 2, 8, 10, tzinfo=ist)) == "1770000000.000000"

    def test_naive_datetime_is_rejected(self):
        with pytest.raises(ValueError):
            datetime_to_slack_ts(datetime(2026, 2, 2))

    def test_later_ts_compares_numerically(self):
        assert later_ts(None, "99.9") == "99.9"
        assert later_ts("100.5", "99.9") == "100.5"
        assert later_ts("999.0", "1770000000.000100") == "1770000000.000100"
        assert later_ts("100.5", "not-a-ts") == "100.5"


class TestFileNames:
    def test_sanitize(self):
        assert sanitize_file_name("a.jpg") == "a.jpg"
        assert sanitize_file_name("Shelf photo (1).JPG") == "Shelf_photo__1_.JPG"
        assert sanitize_file_name("दुकान.png") == "_____.png"

    def test_missing_name_falls_back(self):
        assert sanitize_file_name(None) == "image"
        assert sanitize_file_name("   ") == "image"

    def test_blob_name_and_source_key(self):
        assert derive_blob_name("100.5", 0, "a.jpg") == "100.5-0-a.jpg"
        assert derive_blob_name("100.5", 2, None) == "100.5-2-image"
        assert photo_source_key("100.5", 2) == "100.5:2"
