"""Persistent key-value database backed by SQLite."""

from __future__ import annotations

import os
import sqlite3
import threading
from typing import Iterator

from malairte.storage.base import Batch, Database, NotFoundError, Operation

DATA_FILE_NAME = "chain.sqlite"

_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key BLOB PRIMARY KEY, value BLOB NOT NULL)"


def _prefix_upper_bound(prefix: bytes) -> bytes | None:
    """Smallest key greater than every key starting with prefix, if any."""
    trimmed = prefix.rstrip(b"\xff")
    if not trimmed:
        return None
    return trimmed[:-1] + bytes((trimmed[-1] + 1,))


class SqliteDatabase(Database):
    """A thread-safe database stored in a single SQLite file."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn: sqlite3.Connection | None = connection
        self._lock = threading.RLock()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("database is closed")
        return self._conn

    def put(self, key: bytes, value: bytes) -> None:
        with self._lock:
            conn = self._connection()
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                    (bytes(key), bytes(value)),
                )

    def get(self, key: bytes) -> bytes:
        key = bytes(key)
        with self._lock:
            row = (
                self._connection()
                .execute("SELECT value FROM kv WHERE key = ?", (key,))
                .fetchone()
            )
        if row is None:
            raise NotFoundError(key)
        return bytes(row[0])

    def delete(self, key: bytes) -> None:
        with self._lock:
            conn = self._connection()
            with conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (bytes(key),))

    def has(self, key: bytes) -> bool:
        with self._lock:
            row = (
                self._connection()
                .execute("SELECT 1 FROM kv WHERE key = ?", (bytes(key),))
                .fetchone()
            )
        return row is not None

    def new_batch(self) -> Batch:
        return Batch(self._apply)

    def _apply(self, ops: list[Operation]) -> None:
        with self._lock:
            conn = self._connection()
            with conn:
                for key, value in ops:
                    if value is None:
                        conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                    else:
                        conn.execute(
                            "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                            (key, value),
                        )

    def items_with_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        prefix = bytes(prefix)
        upper = _prefix_upper_bound(prefix)
        with self._lock:
            conn = self._connection()
            if upper is None:
                rows = conn.execute(
                    "SELECT key, value FROM kv WHERE key >= ? ORDER BY key",
                    (prefix,),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY key",
                    (prefix, upper),
                ).fetchall()
        return iter(
            [(bytes(key), bytes(value)) for key, value in rows if bytes(key).startswith(prefix)]
        )

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


def open_sqlite(path: str | os.PathLike) -> SqliteDatabase:
    """Open or create the database kept in the directory at path."""
    directory = os.fspath(path)
    try:
        os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(
            os.path.join(directory, DATA_FILE_NAME),
            check_same_thread=False,
        )
        with conn:
            conn.execute(_SCHEMA)
    except (OSError, sqlite3.Error) as exc:
        raise OSError(f"open database at {directory}: {exc}") from exc
    return SqliteDatabase(conn)