"""UTC time helpers.

Stored timestamps are ISO-8601 with a trailing Z; day buckets are keyed
by the UTC calendar date (YYYY-MM-DD).
"""
from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_z(moment: Optional[datetime] = None) -> str:
    moment = moment or utc_now()
    return moment.isoformat(timespec="milliseconds") + "Z"


def day_key(moment: Optional[datetime] = None) -> str:
    """UTC date bucket, e.g. 2026-10-18."""
    return (moment or utc_now()).strftime("%Y-%m-%d")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp; None for empty, non-string or malformed values."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.rstrip("Z"))
    except ValueError:
        return None


def timestamp_ms(moment: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch, for timestamp-derived identifiers."""
    moment = moment or utc_now()
    return int(moment.replace(tzinfo=timezone.utc).timestamp() * 1000)
