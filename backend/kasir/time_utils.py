from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

EPOCH = datetime(1970, 1, 1)
ONE_MS = timedelta(milliseconds=1)


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def to_epoch_ms(dt: Optional[datetime]) -> Optional[int]:
    """Wire format for timestamps. Naive datetimes are UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return (dt - EPOCH) // ONE_MS


def from_epoch_ms(value: Optional[int]) -> Optional[datetime]:
    """
    Epoch milliseconds -> UTC-naive datetime.

    Raises ValueError when the value is outside the datetime range.
    """
    if value is None:
        return None
    try:
        return EPOCH + value * ONE_MS
    except OverflowError as exc:
        raise ValueError(f"Epoch milliseconds out of range: {value}") from exc


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {name}")


def local_day_bounds(now_utc: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """
    [start, end) of the calendar day containing now_utc in tz,
    returned as UTC-naive datetimes.
    """
    local_now = now_utc.replace(tzinfo=timezone.utc).astimezone(tz)
    start_local = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_local = (start_local + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
    return _local_to_utc_naive(start_local, tz), _local_to_utc_naive(end_local, tz)


def local_month_bounds(now_utc: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """[start, end) of the calendar month containing now_utc in tz, as UTC-naive."""
    local_now = now_utc.replace(tzinfo=timezone.utc).astimezone(tz)
    start_local = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start_local.month == 12:
        end_local = start_local.replace(year=start_local.year + 1, month=1)
    else:
        end_local = start_local.replace(month=start_local.month + 1)
    return _local_to_utc_naive(start_local, tz), _local_to_utc_naive(end_local, tz)


def local_date_key(dt_utc: datetime, tz: ZoneInfo) -> str:
    """YYYY-MM-DD of a UTC-naive datetime as seen in tz."""
    return dt_utc.replace(tzinfo=timezone.utc).astimezone(tz).strftime("%Y-%m-%d")


def _local_to_utc_naive(local_dt: datetime, tz: ZoneInfo) -> datetime:
    # Rebuild with tzinfo so the offset is recomputed for the new wall time (DST).
    naive = local_dt.replace(tzinfo=None)
    return naive.replace(tzinfo=tz).astimezone(timezone.utc).replace(tzinfo=None)
