"""
Shared Utility Functions

Common helper functions used across multiple modules.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional
from zoneinfo import ZoneInfo


def flatten_labels(items: Any) -> List[str]:
    """
    Flatten a potentially nested list of labels to a de-duplicated list of strings.

    Handles various formats:
    - Nested lists: [["a", "b"]] → ["a", "b"]
    - Flat lists: ["a", " b "] → ["a", "b"]
    - Single string: "a" → ["a"]
    - None/empty: None → []

    Blank entries are dropped and the first occurrence order is kept.

    Args:
        items: Any value that could be a list, nested list, or string

    Returns:
        Flat list of strings
    """
    if not items:
        return []

    if isinstance(items, str):
        items = [items]
    elif not isinstance(items, list):
        items = [str(items)]

    result = []
    for item in items:
        values = item if isinstance(item, list) else [item]
        for value in values:
            label = str(value).strip()
            if label and label not in result:
                result.append(label)

    return result


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Return an aware UTC datetime.

    SQLite hands back naive datetimes even for timezone-aware columns;
    those are stored as UTC so they are tagged rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_local_day(day: date, tz_name: str) -> datetime:
    """Midnight of `day` in the given IANA timezone, as an aware datetime."""
    return datetime.combine(day, time.min, tzinfo=ZoneInfo(tz_name))


def end_of_local_day(day: date, tz_name: str) -> datetime:
    """
    Last millisecond (23:59:59.999) of `day` in the given IANA timezone.

    Using the end of the day rather than midnight keeps messages posted
    later on the end date inside the range.
    """
    start = start_of_local_day(day, tz_name)
    return start + timedelta(days=1) - timedelta(milliseconds=1)


def month_week_index(day: int) -> int:
    """
    Map a day of the month to one of four payout weeks.

    Days 1-7 → 0, 8-14 → 1, 15-21 → 2, 22 onwards → 3.
    """
    return min((day - 1) // 7, 3)
