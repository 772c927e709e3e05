from __future__ import annotations

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision so the value survives an epoch-ms round trip."""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def utc_now() -> datetime:
    """Current time in UTC at millisecond precision (store-managed timestamps)."""
    return truncate_to_millis(datetime.now(timezone.utc))


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch."""
    return (ensure_utc(value) - EPOCH) // _ONE_MS


def from_epoch_millis(millis: int | float) -> datetime:
    """Inverse of ``to_epoch_millis``; returns an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=millis)
