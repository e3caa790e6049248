"""
Datetime utilities for consistent timezone handling.

This module provides constants and helper functions for working
with dates and times in a consistent manner across the application.
"""

import datetime
from collections.abc import Callable

# Standard timezone for all application operations
UTC = datetime.timezone.utc

Clock = Callable[[], datetime.datetime]


def now_utc() -> datetime.datetime:
    """
    Get current datetime in UTC.

    Returns:
        datetime.datetime: Current time in UTC timezone
    """
    return datetime.datetime.now(UTC)


def ensure_utc(value: datetime.datetime | None) -> datetime.datetime | None:
    """Attach UTC to naive datetimes; SQLite hands them back without tzinfo."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_datetime(value: datetime.datetime | datetime.date | str | None) -> datetime.datetime | None:
    """
    Parse ISO-8601 strings (including the ``Z`` suffix) and plain dates.

    A bare date (``YYYY-MM-DD``) is interpreted as midnight UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return ensure_utc(value)
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day, tzinfo=UTC)
    text = value.strip()
    try:
        return ensure_utc(datetime.datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return datetime.datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=UTC)
