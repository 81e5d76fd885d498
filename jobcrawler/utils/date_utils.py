"""
Timestamp helpers shared by records and run statistics.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def get_current_timestamp() -> str:
    """
    Current UTC time in ISO 8601 format.

    Example:
        >>> get_current_timestamp()
        '2026-10-18T09:30:00.123456+00:00'
    """
    return utc_now().isoformat()


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """ISO 8601 string for a datetime, or None."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def epoch_seconds(value) -> Optional[int]:
    """
    Coerce a cookie expiry (epoch seconds, possibly fractional) to an int.

    Returns None for missing, non-numeric or non-positive values.

    Example:
        >>> epoch_seconds(1767225600.52)
        1767225600
        >>> epoch_seconds("soon") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(float(value))
    except (TypeError, ValueError):
        return None
    return seconds if seconds > 0 else None
