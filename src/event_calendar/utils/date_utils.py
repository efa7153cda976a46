"""Date and time utilities for the Event Calendar application."""

from datetime import date, datetime

import pytz


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.utc)


def utc_timestamp() -> str:
    """
    Creation timestamp string stored alongside new events.

    Returns:
        ISO-8601 UTC timestamp with millisecond precision, e.g.
        ``2024-03-05T09:30:00.123Z``
    """
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def date_key(year: int, month: int, day: int) -> str:
    """Zero-padded ``YYYY-MM-DD`` key used to match events to grid days."""
    return f"{year:04d}-{month:02d}-{day:02d}"


def local_today() -> date:
    """Wall-clock local date. Read on every call, never cached."""
    return date.today()
