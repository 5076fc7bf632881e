"""kvlite: namespaced, optionally encrypted key/value storage."""

from .errors import (
    BadPadlockError,
    CodecError,
    InvalidNameError,
    KVLiteError,
    StorageError,
    StoreClosedError,
    StoreLockedError,
)
from .config import StoreConfig, load_config
from .namespace import Namespace
from .store import Store, crypt_reset, mem_store, open_store
from .table import Table

__all__ = [
    "open_store",
    "mem_store",
    "crypt_reset",
    "Store",
    "Namespace",
    "Table",
    "StoreConfig",
    "load_config",
    "KVLiteError",
    "BadPadlockError",
    "StoreLockedError",
    "StorageError",
    "StoreClosedError",
    "CodecError",
    "InvalidNameError",
]
