"""Timezone-aware datetime utilities.

All datetime values are stored and compared in UTC. Some database backends
(SQLite) hand back naive datetimes, so values read from storage go through
``ensure_utc`` before they are compared.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current datetime with UTC timezone.

    Always use this function instead of datetime.utcnow() or datetime.now().
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime has UTC timezone.

    If datetime is naive (no timezone), assumes UTC and adds it.
    If datetime has different timezone, converts to UTC.

    Args:
        dt: Datetime to ensure is UTC

    Returns:
        Datetime with UTC timezone, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def is_expired(expiry: datetime | None, now: datetime | None = None) -> bool:
    """Check if a datetime has expired.

    Args:
        expiry: Expiration datetime to check
        now: Current datetime for comparison (defaults to utc_now())

    Returns:
        True if expired (expiry is not in the future), False otherwise
    """
    if expiry is None:
        return False

    if now is None:
        now = utc_now()

    return ensure_utc(expiry) <= ensure_utc(now)


def datetime_to_iso(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()
