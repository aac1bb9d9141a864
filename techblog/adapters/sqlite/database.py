"""
Process-scoped SQLite storage handle.

One SQLiteDatabase is constructed per process (by the app lifespan or the
CLI) and passed to every repository. The connection is opened lazily on first
use and released by close(), which the app calls on shutdown. Transactions
are serialized through a lock so a repository call is atomic with respect to
other requests in the same process.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from techblog.domain.errors import StorageError, UniqueViolation

logger = logging.getLogger(__name__)


def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _unique_field(exc: sqlite3.IntegrityError) -> str | None:
    # sqlite reports "UNIQUE constraint failed: posts.slug"
    message = str(exc)
    if "UNIQUE constraint failed" not in message:
        return None
    column = message.rsplit(":", 1)[-1].strip().split(",")[0]
    return column.split(".")[-1]


class SQLiteDatabase:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._closed:
                raise StorageError("Database handle has been closed")
            if self._conn is None:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                try:
                    conn = sqlite3.connect(self.db_path, check_same_thread=False)
                except sqlite3.Error as e:
                    raise StorageError(f"Cannot open database {self.db_path}: {e}") from e
                conn.row_factory = dict_factory
                conn.execute("PRAGMA foreign_keys = ON;")
                self._conn = conn
                logger.info("Opened database %s", self.db_path)
            return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements atomically; commit on success, roll back on error."""
        with self._lock:
            conn = self.connection()
            try:
                yield conn
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                field = _unique_field(e)
                if field:
                    raise UniqueViolation(field, str(e)) from e
                raise StorageError(str(e)) from e
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(str(e)) from e
            except Exception:
                conn.rollback()
                raise

    def ping(self) -> bool:
        with self.transaction() as conn:
            conn.execute("SELECT 1")
        return True

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Closed database %s", self.db_path)
            self._closed = True
