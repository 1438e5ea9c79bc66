"""UTC datetime helpers.

All timestamps the engine stores are timezone-aware UTC. SQLite returns
naive datetimes for DateTime(timezone=True) columns, so values read back
from persistence pass through ensure_utc before arithmetic.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return dt as an aware UTC datetime.

    Naive values are assumed to already be UTC; aware values are converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def elapsed_ms(start: datetime, end: datetime | None = None) -> int:
    """Whole milliseconds between start and end (default: now), never negative."""
    end = end or utc_now()
    delta = ensure_utc(end) - ensure_utc(start)  # type: ignore[operator]
    return max(0, int(delta.total_seconds() * 1000))
