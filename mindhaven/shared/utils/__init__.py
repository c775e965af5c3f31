"""Shared utilities for the MindHaven platform."""
from .pii import hash_user_id, configure_hash_salt
from .clock import utc_now, isoformat_z, day_key, parse_timestamp, timestamp_ms

__all__ = [
    "hash_user_id",
    "configure_hash_salt",
    "utc_now",
    "isoformat_z",
    "day_key",
    "parse_timestamp",
    "timestamp_ms",
]
