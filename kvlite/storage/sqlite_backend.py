"""SQLite-backed storage backend
================================

Persists framed records in a single SQLite file using one table:

    records(bucket TEXT, key TEXT, value BLOB, PRIMARY KEY (bucket, key))

A kvlite table is the set of rows sharing a ``bucket`` value, so a table
exists exactly while it holds data.

Concurrency:
- Every thread gets its own connection; WAL journaling lets readers run in
  parallel with a writer.
- Each mutating call runs in its own ``BEGIN IMMEDIATE`` transaction, which
  serializes writers at the engine level.
- Cross-process exclusivity comes from an exclusive file lock on
  ``<path>.lock``, taken at open with a short bounded wait. Failing to take
  it raises `StoreLockedError`; there is no retry.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from filelock import FileLock, Timeout

from kvlite.errors import StorageError, StoreClosedError, StoreLockedError
from kvlite.namespace import SEP, SYSTEM_TABLE
from .base import Backend

logger = logging.getLogger(__name__)

DEFAULT_PRAGMAS = {
    "journal_mode": "WAL",
    "synchronous": "NORMAL",
    "temp_store": "MEMORY",
}

# Upper bound for names below a table: everything starting with
# ``table + SEP`` sorts before ``table + _SEP_HI``.
_SEP_HI = chr(ord(SEP) + 1)


def _apply_pragmas(conn: sqlite3.Connection, pragmas: Optional[dict] = None) -> None:
    p = dict(DEFAULT_PRAGMAS)
    if pragmas:
        p.update(pragmas)
    for name, value in p.items():
        conn.execute(f"PRAGMA {name}={value}")


def _migrate(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            bucket TEXT NOT NULL,
            key TEXT NOT NULL,
            value BLOB NOT NULL,
            PRIMARY KEY (bucket, key)
        ) WITHOUT ROWID
        """
    )


class SQLiteBackend(Backend):
    """Backend persisting to a single SQLite file.

    Parameters
    - path: database file; parent directories are created as needed.
    - lock_timeout: seconds to wait for the exclusive file lock.
    - busy_timeout: seconds a connection waits on engine-level locks.
    """

    def __init__(
        self,
        path: Union[str, Path],
        *,
        lock_timeout: float = 1.0,
        busy_timeout: float = 5.0,
        pragmas: Optional[dict] = None,
    ) -> None:
        self.path = Path(path)
        self.busy_timeout = busy_timeout
        self._pragmas = pragmas
        self._local = threading.local()
        self._conns: List[sqlite3.Connection] = []
        self._conns_lock = threading.Lock()
        self._closed = False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(f"{self.path}.lock", timeout=lock_timeout, thread_local=False)
        try:
            self._file_lock.acquire()
        except Timeout as e:
            raise StoreLockedError(str(self.path)) from e

        try:
            with self._engine_errors("open"):
                _migrate(self._connection())
        except BaseException:
            self.close()
            raise
        logger.debug("Opened SQLite store %s", self.path)

    def _connection(self) -> sqlite3.Connection:
        if self._closed:
            raise StoreClosedError(f"store {self.path} is closed")
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = sqlite3.connect(
                str(self.path),
                timeout=self.busy_timeout,
                isolation_level=None,     # autocommit; writes BEGIN explicitly
                check_same_thread=False,  # close() may run on another thread
            )
            _apply_pragmas(conn, self._pragmas)
            with self._conns_lock:
                self._conns.append(conn)
            self._local.conn = conn
        return conn

    @contextmanager
    def _engine_errors(self, op: str) -> Iterator[None]:
        try:
            yield
        except (sqlite3.Error, UnicodeEncodeError) as e:
            raise StorageError(f"{op} failed on {self.path}: {e}") from e

    @contextmanager
    def _transaction(self, op: str) -> Iterator[sqlite3.Connection]:
        with self._engine_errors(op):
            conn = self._connection()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def tables(self) -> List[str]:
        with self._engine_errors("tables"):
            rows = self._connection().execute(
                "SELECT DISTINCT bucket FROM records WHERE bucket != ? ORDER BY bucket",
                (SYSTEM_TABLE,),
            ).fetchall()
        return [r[0] for r in rows]

    def count_keys(self, table: str) -> int:
        with self._engine_errors("count_keys"):
            row = self._connection().execute(
                "SELECT COUNT(*) FROM records WHERE bucket = ?", (table,)
            ).fetchone()
        return int(row[0])

    def keys(self, table: str) -> List[str]:
        with self._engine_errors("keys"):
            rows = self._connection().execute(
                "SELECT key FROM records WHERE bucket = ? ORDER BY key", (table,)
            ).fetchall()
        return [r[0] for r in rows]

    def get(self, table: str, key: str) -> Tuple[bytes, bool]:
        with self._engine_errors("get"):
            row = self._connection().execute(
                "SELECT value FROM records WHERE bucket = ? AND key = ?", (table, key)
            ).fetchone()
        if row is None:
            return b"", False
        return bytes(row[0]), True

    def set(self, table: str, key: str, data: bytes) -> None:
        with self._transaction("set") as conn:
            conn.execute(
                "INSERT INTO records(bucket, key, value) VALUES(?, ?, ?) "
                "ON CONFLICT(bucket, key) DO UPDATE SET value = excluded.value",
                (table, key, memoryview(data)),
            )

    def unset(self, table: str, key: str) -> None:
        with self._transaction("unset") as conn:
            conn.execute("DELETE FROM records WHERE bucket = ? AND key = ?", (table, key))

    def drop(self, table: str) -> None:
        with self._transaction("drop") as conn:
            cur = conn.execute(
                "DELETE FROM records WHERE bucket = ? OR (bucket >= ? AND bucket < ?)",
                (table, table + SEP, table + _SEP_HI),
            )
            logger.debug("Dropped %s from %s (%d records)", table, self.path, cur.rowcount)

    def close(self) -> None:
        with self._conns_lock:
            if self._closed:
                return
            self._closed = True
            conns, self._conns = self._conns, []
        for conn in conns:
            conn.close()
        self._file_lock.release()
        logger.debug("Closed SQLite store %s", self.path)
