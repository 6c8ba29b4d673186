"""Datetime helpers for Cassandra timestamps."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds.

    Cassandra stores timestamps with millisecond precision, so values kept
    in memory must match what a later read returns (optimistic locking
    compares them with ``IF updated_at = ?``).
    """
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (Cassandra returns naive values)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt
