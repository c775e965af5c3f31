"""Key-value persistence used for every entity.

Keys are namespaced strings ("user_profile:<id>", "activity_log:<day>").
Values are JSON-serializable objects. Two backends are provided: an
in-memory dict for development and tests, and a PostgreSQL table
(key TEXT PRIMARY KEY, value JSONB).

Index keys hold lists of ids and are updated with a plain
read-modify-write. The store gives no transactions, so two concurrent
writers to the same index can lose an update; see DESIGN.md.
"""
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import Json

from mindhaven.shared.errors import StorageError
from .connection import ConnectionManager

logger = logging.getLogger(__name__)


class KVStore(ABC):
    """Generic get/set/getByPrefix persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def get_by_prefix(self, prefix: str) -> List[Any]:
        """Return every value whose key starts with prefix, ordered by key."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    def health_check(self) -> Dict[str, Any]:
        return {"status": "ok", "healthy": True}


class InMemoryKVStore(KVStore):
    """Dict-backed store.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store, matching a serializing backend.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}
        logger.info("KV_STORE_INITIALIZED", extra={"backend": "memory"})

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def get_by_prefix(self, prefix: str) -> List[Any]:
        return [
            copy.deepcopy(self._data[key])
            for key in sorted(self._data)
            if key.startswith(prefix)
        ]

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)

    def health_check(self) -> Dict[str, Any]:
        return {"status": "memory", "healthy": True, "keys": len(self._data)}


class PostgresKVStore(KVStore):
    """KV store backed by a single JSONB table."""

    def __init__(self, connection_manager: ConnectionManager, table_name: Optional[str] = None):
        self.connection_manager = connection_manager
        self.table_name = table_name or connection_manager.config.kv_table

        logger.info(
            "KV_STORE_INITIALIZED",
            extra={"backend": "postgres", "table_name": self.table_name}
        )

    def ensure_table(self) -> None:
        """Create the backing table if it does not exist."""
        self._execute(
            f"CREATE TABLE IF NOT EXISTS {self.table_name} ("
            "key TEXT NOT NULL PRIMARY KEY, value JSONB NOT NULL)",
            (),
            operation="ensure_table",
            commit=True,
        )

    def get(self, key: str) -> Optional[Any]:
        rows = self._execute(
            f"SELECT value FROM {self.table_name} WHERE key = %s",
            (key,),
            operation="get",
        )
        return rows[0][0] if rows else None

    def set(self, key: str, value: Any) -> None:
        self._execute(
            f"INSERT INTO {self.table_name} (key, value) VALUES (%s, %s) "
            "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value",
            (key, Json(value)),
            operation="set",
            commit=True,
        )

    def get_by_prefix(self, prefix: str) -> List[Any]:
        rows = self._execute(
            f"SELECT key, value FROM {self.table_name} WHERE key LIKE %s ORDER BY key",
            (_escape_like(prefix) + "%",),
            operation="get_by_prefix",
        )
        return [row[1] for row in rows]

    def delete(self, key: str) -> None:
        self._execute(
            f"DELETE FROM {self.table_name} WHERE key = %s",
            (key,),
            operation="delete",
            commit=True,
        )

    def health_check(self) -> Dict[str, Any]:
        return self.connection_manager.health_check()

    def _execute(self, query: str, params: tuple, operation: str, commit: bool = False) -> list:
        try:
            with self.connection_manager.get_connection() as conn:
                try:
                    with conn.cursor() as cur:
                        cur.execute(query, params)
                        rows = cur.fetchall() if cur.description else []
                    if commit:
                        conn.commit()
                    return rows
                except psycopg2.Error:
                    conn.rollback()
                    raise
        except psycopg2.Error as e:
            logger.error(
                "KV_STORE_OPERATION_FAILED",
                extra={
                    "operation": operation,
                    "table_name": self.table_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise StorageError(f"KV {operation} failed: {e}") from e


def _escape_like(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_list(store: KVStore, key: str) -> List[Any]:
    """Read a list-valued key, treating absence as empty."""
    return store.get(key) or []


def append_to_index(store: KVStore, key: str, item: Any) -> List[Any]:
    """Append item to the list stored at key (unsynchronized)."""
    items = get_list(store, key)
    items.append(item)
    store.set(key, items)
    return items


def prepend_to_index(store: KVStore, key: str, item: Any, limit: Optional[int] = None) -> List[Any]:
    """Insert item at the head of the list at key, keeping at most limit items."""
    items = get_list(store, key)
    items.insert(0, item)
    if limit is not None:
        items = items[:limit]
    store.set(key, items)
    return items
