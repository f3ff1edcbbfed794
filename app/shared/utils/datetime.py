"""
UTC datetime helpers.

Record timestamps are stored timezone-aware; search documents carry them as
ISO-8601 strings so the index can sort on createdAt.
"""

from datetime import UTC, datetime


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime to UTC.

    Naive values are assumed to already be UTC (asyncpg returns aware values,
    SQLite in tests does not).

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso_utc(dt: datetime | None) -> str | None:
    """Return an ISO-8601 string in UTC, or None."""
    normalized = ensure_utc(dt)
    return normalized.isoformat() if normalized is not None else None
