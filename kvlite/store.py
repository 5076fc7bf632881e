"""Store handles and their entry points.

`open_store` opens a persistent SQLite-backed store guarded by an optional
padlock, `mem_store` creates an ephemeral in-memory store, and `crypt_reset`
abandons a lost padlock by purging encrypted data.

    >>> store = mem_store()
    >>> store.set("users", "alice", {"age": 30})
    >>> store.get("users", "alice")
    ({'age': 30}, True)
    >>> store.sub("tenant").tables()
    []
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from kvlite import keymanager
from kvlite.config import StoreConfig
from kvlite.namespace import Namespace
from kvlite.storage.base import Backend
from kvlite.storage.codec import Codec, new_secret
from kvlite.storage.memory_backend import MemoryBackend
from kvlite.storage.serializer import Serializer, get_serializer
from kvlite.storage.sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)


class Store(Namespace):
    """Handle to one database: one backend plus one codec.

    The store is the root namespace; `sub` and `bucket` return prefixed views
    sharing this handle. Closing any of them closes the store.
    """

    def __init__(self, backend: Backend, codec: Codec) -> None:
        super().__init__(self, "")
        self.backend = backend
        self.codec = codec

    def __repr__(self) -> str:
        return f"Store(backend={type(self.backend).__name__})"

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write(self, table: str, key: str, value: Any, encrypt: bool, serializer: Optional[Serializer] = None) -> None:
        """Store `value` under the qualified `table` name."""
        self.backend.set(table, key, self.codec.pack(value, encrypt, serializer))

    def read(self, table: str, key: str, serializer: Optional[Serializer] = None) -> Tuple[Any, bool]:
        """Fetch `key` from the qualified `table` name as ``(value, found)``."""
        data, found = self.backend.get(table, key)
        if not found:
            return None, False
        return self.codec.unpack(data, serializer), True

    def close(self) -> None:
        self.backend.close()


def _open_backend(path: Union[str, Path], cfg: StoreConfig) -> SQLiteBackend:
    return SQLiteBackend(path, lock_timeout=cfg.lock_timeout, busy_timeout=cfg.busy_timeout)


def open_store(
    path: Union[str, Path],
    padlock: keymanager.Padlock = None,
    *,
    config: Optional[StoreConfig] = None,
    serializer: Union[str, Serializer, None] = None,
) -> Store:
    """Open or create the persistent store at `path`.

    A new database binds to `padlock` (or to no padlock). An existing one
    must be opened with the same padlock, otherwise `BadPadlockError` is
    raised. `StoreLockedError` means another instance holds the file.
    """
    cfg = config or StoreConfig()
    # resolve before taking the file lock
    resolved = get_serializer(serializer or cfg.serializer)
    backend = _open_backend(path, cfg)
    try:
        if keymanager.reset_pending(backend):
            logger.warning("Resuming interrupted encryption reset on %s", path)
            keymanager.purge(backend)
        secret = keymanager.unlock(backend, padlock, cfg.kdf_iterations)
    except BaseException:
        backend.close()
        raise
    return Store(backend, Codec(secret, resolved))


def mem_store(serializer: Union[str, Serializer, None] = None) -> Store:
    """Create an ephemeral in-memory store with a random master key."""
    return Store(MemoryBackend(), Codec(new_secret(), get_serializer(serializer)))


def crypt_reset(path: Union[str, Path], *, config: Optional[StoreConfig] = None) -> int:
    """Drop all encrypted records at `path` and forget its master key.

    The next `open_store` creates a fresh master key bound to whatever
    padlock it is given. Returns the number of records removed.
    """
    backend = _open_backend(path, config or StoreConfig())
    try:
        return keymanager.purge(backend)
    finally:
        backend.close()
