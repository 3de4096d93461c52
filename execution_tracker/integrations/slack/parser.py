"""
Slack Timestamp and File Name Helpers

Converts Slack "ts" strings to absolute times and derives the deterministic
names under which imported files are keyed and stored.
"""

import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

DEFAULT_FILE_NAME = "image"


def slack_ts_to_datetime(ts: str) -> datetime:
    """
    Convert a Slack timestamp to an aware UTC datetime.

    Slack timestamps are fractional Unix seconds encoded as strings, e.g.
    "1770000000.000100". The result is truncated to whole milliseconds, so
    "1770000000.000100" -> 2026-02-02T02:40:00.000+00:00.

    Raises:
        ValueError: If the timestamp is not numeric
    """
    try:
        seconds = Decimal(ts)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Invalid Slack timestamp: {ts!r}")

    if not seconds.is_finite():
        raise ValueError(f"Invalid Slack timestamp: {ts!r}")

    milliseconds = int(seconds * 1000)
    return _EPOCH + timedelta(milliseconds=milliseconds)


def datetime_to_slack_ts(value: datetime) -> str:
    """Format an aware datetime as a Slack timestamp string (microsecond precision)."""
    if value.tzinfo is None:
        raise ValueError("datetime_to_slack_ts requires an aware datetime")
    delta = value.astimezone(timezone.utc) - _EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    return f"{micros // 1_000_000}.{micros % 1_000_000:06d}"


def sanitize_file_name(name: Optional[str]) -> str:
    """
    Reduce a file name to [A-Za-z0-9._-] so it is safe as an object key.

    Examples:
        "Shelf photo (1).JPG" -> "Shelf_photo__1_.JPG"
        None -> "image"
    """
    if not name or not name.strip():
        return DEFAULT_FILE_NAME
    return _UNSAFE_CHARS.sub("_", name.strip())


def photo_source_key(ts: str, file_index: int) -> str:
    """Unique key of one attachment: message timestamp plus position in its file list."""
    return f"{ts}:{file_index}"


def derive_blob_name(ts: str, file_index: int, name: Optional[str]) -> str:
    """
    Deterministic object name for an attachment.

    Example:
        derive_blob_name("100.5", 0, "a.jpg") -> "100.5-0-a.jpg"
    """
    return f"{ts}-{file_index}-{sanitize_file_name(name)}"


def later_ts(current: Optional[str], candidate: str) -> Optional[str]:
    """
    Return whichever of two Slack timestamps is newer, compared numerically.

    An unparseable candidate is ignored, e.g.
        later_ts("100.5", "99.9") -> "100.5"
        later_ts(None, "99.9") -> "99.9"
    """
    try:
        value = Decimal(candidate)
    except (InvalidOperation, TypeError):
        return current
    if not value.is_finite():
        return current
    if current is None or value > Decimal(current):
        return candidate
    return current
