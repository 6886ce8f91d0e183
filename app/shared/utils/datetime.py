"""UTC datetime helpers.

Timestamps are stored timezone-aware where the backend supports it. SQLite
hands back naive values; normalize them with ensure_utc before comparing or
serializing.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return dt as an aware UTC datetime.

    Naive values are assumed to already be UTC (SQLite, CURRENT_TIMESTAMP);
    aware values are converted. None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
