"""
Unit Tests for Utility Functions

Tests shared helper functions.
"""

from datetime import date, datetime, timedelta, timezone

from execution_tracker.utils.helpers import (
    as_utc,
    end_of_local_day,
    flatten_labels,
    month_week_index,
    start_of_local_day,
)


def test_flatten_labels_empty():
    """Test flatten_labels with empty input."""
    assert flatten_labels(None) == []
    assert flatten_labels([]) == []


def test_flatten_labels_single_string():
    assert flatten_labels("Brand A") == ["Brand A"]


def test_flatten_labels_nested_and_deduplicated():
    """Test nested lists are flattened, trimmed and de-duplicated in order."""
    assert flatten_labels([["Brand A", " Brand B"], ["Brand A", ""], "Brand C"]) == [
        "Brand A",
        "Brand B",
        "Brand C",
    ]


def test_as_utc():
    naive = datetime(2026, 2, 2, 2, 40)
    assert as_utc(naive) == datetime(2026, 2, 2, 2, 40, tzinfo=timezone.utc)

    ist = timezone(timedelta(hours=5, minutes=30))
    assert as_utc(datetime(2026, 2, 2, 8, 10, tzinfo=ist)).hour == 2
    assert as_utc(None) is None


def test_local_day_bounds():
    start = start_of_local_day(date(2026, 2, 10), "Asia/Kolkata")
    end = end_of_local_day(date(2026, 2, 10), "Asia/Kolkata")

    assert start.astimezone(timezone.utc) == datetime(2026, 2, 9, 18, 30, tzinfo=timezone.utc)
    assert (end.hour, end.minute, end.second, end.microsecond) == (23, 59, 59, 999000)
    assert end - start == timedelta(days=1) - timedelta(milliseconds=1)


def test_month_week_index():
    """Test the four payout weeks; days after the 28th stay in week 4."""
    assert [month_week_index(d) for d in (1, 7, 8, 14, 15, 21, 22, 28, 31)] == [0, 0, 1, 1, 2, 2, 3, 3, 3]
