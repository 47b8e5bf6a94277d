"""Datetime helpers."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC.

    Some database drivers (SQLite in particular) hand back naive values
    for ``DateTime(timezone=True)`` columns. Naive values are assumed to
    already be in UTC.

    Args:
        value: Aware or naive datetime

    Returns:
        Timezone-aware datetime in UTC

    Examples:
        >>> ensure_utc(datetime(2025, 1, 1)).tzinfo is UTC
        True
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
