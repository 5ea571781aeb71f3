"""
GeoCache State Stores

The lifecycle layer consumes a key-addressed byte store:

    get(key) -> bytes | None     None (or empty bytes) means absent
    put(key, value)              overwrite the whole value
    delete(key)                  remove the key

Stores signal failure by raising; the contract wraps those exceptions into
StoreReadError / StoreWriteError. Replication, durability and per-key
atomicity belong to the host behind this interface.
"""

import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union


class StateStore(ABC):
    """Abstract key-addressed world state."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored under key, or None if absent."""
        pass

    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""
        pass


class InMemoryStateStore(StateStore):
    """
    In-memory world state for development/testing.

    WARNING: Not suitable for production.
    - Not persistent across restarts
    - Not shared between processes
    """

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._data)


class SqliteStateStore(StateStore):
    """
    SQLite-backed world state.

    Schema:
        CREATE TABLE world_state (
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL
        );

    Connections are thread-local and reused within a thread.
    """

    def __init__(self, path: Union[str, Path] = "data/geocache.db"):
        self.path = Path(path)
        self._local = threading.local()
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.row_factory = sqlite3.Row
            self._local.conn = conn
        return conn

    def _init_schema(self) -> None:
        conn = self._get_connection()
        with conn:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS world_state (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL
            );""")

    def get(self, key: str) -> Optional[bytes]:
        conn = self._get_connection()
        row = conn.execute("SELECT value FROM world_state WHERE key=?", (key,)).fetchone()
        return bytes(row["value"]) if row else None

    def put(self, key: str, value: bytes) -> None:
        conn = self._get_connection()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO world_state(key, value) VALUES(?,?)",
                (key, sqlite3.Binary(value))
            )

    def delete(self, key: str) -> None:
        conn = self._get_connection()
        with conn:
            conn.execute("DELETE FROM world_state WHERE key=?", (key,))

    def keys(self, prefix: str = "") -> List[str]:
        conn = self._get_connection()
        rows = conn.execute(
            "SELECT key FROM world_state WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix)
        ).fetchall()
        return [row["key"] for row in rows]

    def reset(self) -> None:
        """Remove every key (test isolation)."""
        conn = self._get_connection()
        with conn:
            conn.execute("DELETE FROM world_state")

    def close(self) -> None:
        """Close this thread's connection."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None


class RedisStateStore(StateStore):
    """
    Redis-backed world state.

    Takes an already configured redis-py compatible client (anything with
    get/set/delete); this module does not import redis itself.
    """

    def __init__(self, redis_client, key_prefix: str = "geocache:"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[bytes]:
        value = self.redis.get(self._key(key))
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def put(self, key: str, value: bytes) -> None:
        self.redis.set(self._key(key), value)

    def delete(self, key: str) -> None:
        self.redis.delete(self._key(key))
