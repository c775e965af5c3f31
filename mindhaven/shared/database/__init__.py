"""Persistence layer for MindHaven services.

Provides the key-value store abstraction with in-memory and PostgreSQL
backends, plus connection pooling and health checks for the latter.
"""

from .connection import (
    DatabaseConfig,
    ConnectionManager,
)
from .kv_store import (
    KVStore,
    InMemoryKVStore,
    PostgresKVStore,
    get_list,
    append_to_index,
    prepend_to_index,
)

__all__ = [
    "DatabaseConfig",
    "ConnectionManager",
    "KVStore",
    "InMemoryKVStore",
    "PostgresKVStore",
    "get_list",
    "append_to_index",
    "prepend_to_index",
]
