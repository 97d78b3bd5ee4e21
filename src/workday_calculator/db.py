"""Key-value persistence: SQLite for real hosts, a dict for tests."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Protocol

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
LOG_KEY = "log"
BREAK_SESSIONS_PREFIX = "break-sessions-"


def break_sessions_key(day: str) -> str:
    return f"{BREAK_SESSIONS_PREFIX}{day}"


class KeyValueStore(Protocol):
    """Durable string store supplied by the host."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


def open_database(path: Path) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(path, isolation_level=None)
    conn.row_factory = sqlite3.Row
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(path: Path) -> Iterator[sqlite3.Connection]:
    conn = open_database(path)
    try:
        yield conn
    finally:
        conn.close()


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )


def read_value(conn: sqlite3.Connection, key: str) -> Optional[str]:
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    return None if row is None else row["value"]


def write_value(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute(
        """
        INSERT INTO kv_store (key, value, updated_at)
        VALUES (?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, value),
    )


def delete_value(conn: sqlite3.Connection, key: str) -> None:
    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


class SqliteStore:
    """:class:`KeyValueStore` backed by a single SQLite file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def get(self, key: str) -> Optional[str]:
        with database_connection(self.db_path) as conn:
            return read_value(conn, key)

    def set(self, key: str, value: str) -> None:
        with database_connection(self.db_path) as conn:
            write_value(conn, key, value)
        logger.debug("Stored %s (%d bytes).", key, len(value))

    def delete(self, key: str) -> None:
        with database_connection(self.db_path) as conn:
            delete_value(conn, key)


class MemoryStore:
    """In-process :class:`KeyValueStore`; nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


def load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read a JSON document, falling back to ``default`` if it is missing or corrupt."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed JSON stored under %s.", key)
        return default


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))
