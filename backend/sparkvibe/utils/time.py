from __future__ import annotations

from datetime import date, datetime, timezone, timedelta
from typing import Optional

__all__ = [
    "utc_now",
    "utc_iso",
    "as_utc",
    "utc_date",
    "days_ago",
]

def utc_now() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)

def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def utc_date(dt: datetime) -> date:
    """Calendar date of dt in UTC."""
    return as_utc(dt).date()

def utc_iso(dt: Optional[datetime] = None) -> str:
    """RFC3339 / ISO8601 with trailing Z."""
    dt = as_utc(dt or utc_now())
    return dt.isoformat().replace("+00:00", "Z")

def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) - timedelta(days=days)
