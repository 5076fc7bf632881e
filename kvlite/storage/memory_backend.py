"""Memory-backed storage backend

This backend stores framed records in memory as a data structure
`[<table>][<key>]`. Nothing is persisted; it backs `mem_store()` and tests.
"""
import threading
from contextlib import contextmanager
from typing import Dict, List, Tuple

from kvlite.errors import StoreClosedError
from kvlite.namespace import SYSTEM_TABLE, in_subtree
from .base import Backend


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers_waiting = 0
        self._writer_active = False

    @contextmanager
    def read_lock(self):
        with self._cond:
            while self._writer_active or self._writers_waiting > 0:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_lock(self):
        with self._cond:
            self._writers_waiting += 1
            while self._readers > 0 or self._writer_active:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer_active = True
        try:
            yield
        finally:
            with self._cond:
                self._writer_active = False
                self._cond.notify_all()


class MemoryBackend(Backend):
    def __init__(self):
        self._lock = ReadWriteLock()
        self._store: Dict[str, Dict[str, bytes]] = {}
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError("memory store is closed")

    def tables(self) -> List[str]:
        with self._lock.read_lock():
            self._check_open()
            return sorted(t for t in self._store if t != SYSTEM_TABLE)

    def count_keys(self, table: str) -> int:
        with self._lock.read_lock():
            self._check_open()
            return len(self._store.get(table, {}))

    def keys(self, table: str) -> List[str]:
        with self._lock.read_lock():
            self._check_open()
            return sorted(self._store.get(table, {}))

    def get(self, table: str, key: str) -> Tuple[bytes, bool]:
        with self._lock.read_lock():
            self._check_open()
            data = self._store.get(table, {}).get(key)
            if data is None:
                return b"", False
            return data, True

    def set(self, table: str, key: str, data: bytes) -> None:
        with self._lock.write_lock():
            self._check_open()
            self._store.setdefault(table, {})[key] = bytes(data)

    def unset(self, table: str, key: str) -> None:
        with self._lock.write_lock():
            self._check_open()
            t = self._store.get(table)
            if t is None:
                return
            t.pop(key, None)
            # a table exists only while it holds data
            if not t:
                del self._store[table]

    def drop(self, table: str) -> None:
        with self._lock.write_lock():
            self._check_open()
            for name in [n for n in self._store if in_subtree(n, table)]:
                del self._store[name]

    def close(self) -> None:
        with self._lock.write_lock():
            self._store.clear()
            self._closed = True
