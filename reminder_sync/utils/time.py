"""
Time utilities for message timestamps and reminder due dates.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo
from typing import Optional

from dateutil import parser as dateutil_parser

from reminder_sync.config.settings import get_settings


def get_current_time() -> datetime:
    """Get the current instant as a UTC-aware datetime."""
    return datetime.now(timezone.utc)


def get_local_date(tz_name: Optional[str] = None) -> date:
    """
    Get today's calendar date in the configured timezone.

    Args:
        tz_name: IANA timezone name (defaults to settings.timezone)

    Returns:
        Today's date in that timezone
    """
    if tz_name is None:
        tz_name = get_settings().timezone
    return datetime.now(ZoneInfo(tz_name)).date()


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Args:
        dt: Datetime to convert (naive values are assumed to be UTC)

    Returns:
        Datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso_utc(dt: datetime) -> str:
    """Format an instant as ISO 8601 UTC with millisecond precision, e.g. 2024-05-01T09:30:00.000Z."""
    return to_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Two defaults that disagree in every field; a string that resolves to the
# same date under both names its own year, month and day.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 3))


def normalize_due_date(value: Optional[str]) -> Optional[str]:
    """
    Normalize a model-supplied due date to YYYY-MM-DD.

    Already-ISO dates pass through untouched. Other shapes that spell out a
    full calendar date ("2024-05-10T00:00:00", "May 10, 2024") are reduced
    to that date. Partial or relative text ("May 2024", "2024-05",
    "Friday") is returned stripped but otherwise verbatim, since dateutil
    would fill the missing parts from the current date.

    Args:
        value: Raw due date string from the model

    Returns:
        Normalized date string, or None for empty input
    """
    if value is None:
        return None

    value = value.strip()
    if not value:
        return None

    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        pass

    try:
        first, second = (dateutil_parser.parse(value, default=d).date() for d in _FILL_DEFAULTS)
    except (ValueError, OverflowError):
        return value

    if first != second:
        return value
    return first.isoformat()
