"""
cache/store.py -- Expiring key-value stores backing session tokens.

Two interchangeable backends implement the SessionStore protocol:

  MemorySessionStore  -- process-local dict with lazy expiry on read.
  SQLiteSessionStore  -- SQLite-backed expiring cache; survives restarts and
                         can be shared by several processes on one host.

Expired entries behave exactly like absent ones. Expiry is checked lazily on
read; purge_expired() is an optional maintenance sweep and is never needed for
correctness.

Usage:
    store = create_session_store(get_settings())
    store.put("authToken:abc", "kyle", 28800)
    store.get("authToken:abc")          # "kyle", or None once expired
    store.delete("authToken:abc")       # idempotent

Layer rule: cache/ imports only stdlib and core/. It does NOT import from auth/.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("tokengate.cache")

Clock = Callable[[], float]

_DDL = """
CREATE TABLE IF NOT EXISTS session_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    expires_at  REAL NOT NULL
);
"""


class SessionStoreUnavailable(Exception):
    """The backing store could not complete an operation."""


class SessionStore(Protocol):
    def put(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def get(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...

    def purge_expired(self) -> int: ...


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class MemorySessionStore:
    """Thread-safe in-process expiring map.

    Entries are immutable (value, expires_at) tuples, expires_at in epoch
    seconds like SessionManager and SQLiteSessionStore. Writers take the store
    lock; readers do a single dict lookup, so a read never blocks a writer and
    never observes a half-written entry.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._data: dict[str, tuple[str, float]] = {}

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            self._data[key] = (value, expires_at)

    def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            with self._lock:
                # Only drop the entry we saw; a concurrent put may have replaced it.
                if self._data.get(key) is entry:
                    del self._data[key]
            return None
        return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns number of entries removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._data.items() if now >= expires_at]
            for key in expired:
                del self._data[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._data)


# ---------------------------------------------------------------------------
# SQLite backend
# ---------------------------------------------------------------------------


class SQLiteSessionStore:
    """Expiring key-value store persisted in a SQLite file.

    expires_at is stored as wall-clock epoch seconds so entries stay valid
    across process restarts. All connection use goes through one lock because
    the connection is shared between request threads (check_same_thread=False).
    Every sqlite3.Error is re-raised as SessionStoreUnavailable. Keys that
    cannot be encoded as UTF-8 (lone surrogates) read back as absent.
    """

    def __init__(self, db_path: Path | str = ":memory:", clock: Clock = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute(_DDL)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise SessionStoreUnavailable(f"Could not open session store at {db_path}: {exc}") from exc

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            try:
                self._conn.execute(
                    "INSERT OR REPLACE INTO session_store (key, value, expires_at) VALUES (?, ?, ?)",
                    (key, value, expires_at),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                raise SessionStoreUnavailable(str(exc)) from exc
            except UnicodeEncodeError as exc:
                raise SessionStoreUnavailable(f"Key or value is not storable: {exc}") from exc

    def get(self, key: str) -> str | None:
        """Return the stored value if it exists and hasn't expired."""
        now = self._clock()
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT value, expires_at FROM session_store WHERE key = ?",
                    (key,),
                ).fetchone()
                if row is None:
                    return None
                value, expires_at = row
                if now >= expires_at:
                    self._conn.execute(
                        "DELETE FROM session_store WHERE key = ? AND expires_at <= ?",
                        (key, now),
                    )
                    self._conn.commit()
                    return None
                return value
            except sqlite3.Error as exc:
                raise SessionStoreUnavailable(str(exc)) from exc
            except UnicodeEncodeError:
                # SQLite cannot bind it, so nothing can be stored under it.
                return None

    def delete(self, key: str) -> None:
        with self._lock:
            try:
                self._conn.execute("DELETE FROM session_store WHERE key = ?", (key,))
                self._conn.commit()
            except sqlite3.Error as exc:
                raise SessionStoreUnavailable(str(exc)) from exc
            except UnicodeEncodeError:
                return

    def purge_expired(self) -> int:
        """Delete all expired entries. Returns number of rows removed."""
        now = self._clock()
        with self._lock:
            try:
                cursor = self._conn.execute("DELETE FROM session_store WHERE expires_at <= ?", (now,))
                self._conn.commit()
            except sqlite3.Error as exc:
                raise SessionStoreUnavailable(str(exc)) from exc
        return cursor.rowcount

    def close(self) -> None:
        with self._lock:
            self._conn.close()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_session_store(settings: Settings) -> SessionStore:
    """Build the backend named by settings.session_backend."""
    if settings.session_backend == "sqlite":
        logger.info("Using SQLite session store at %s", settings.session_db_path)
        return SQLiteSessionStore(settings.session_db_path)
    return MemorySessionStore()
