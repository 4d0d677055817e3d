from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware_utc(dt_value: datetime | None) -> datetime | None:
    """
    Ensure a datetime is timezone-aware UTC.

    Postgres TIMESTAMPTZ values come back aware, but values built in memory
    (or read from naive columns) may not be.
    """
    if dt_value is None:
        return None
    if dt_value.tzinfo is None:
        return dt_value.replace(tzinfo=timezone.utc)
    return dt_value.astimezone(timezone.utc)


def is_fresh(
    updated_at: datetime | None,
    ttl: timedelta,
    now: datetime | None = None,
) -> bool:
    """
    Whether a cached row written at ``updated_at`` is still within ``ttl``.

    A ttl of zero or less means cached data never expires. A missing
    timestamp is never fresh.
    """
    if updated_at is None:
        return False
    if ttl <= timedelta(0):
        return True
    now = now or utc_now()
    return now - ensure_aware_utc(updated_at) < ttl
