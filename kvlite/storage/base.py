"""Storage backend interface definitions.

Defines the Backend abstract class every kvlite engine adapter implements.
Backends deal in qualified table names and framed record bytes only; name
validation, namespacing and value encoding happen above them.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Tuple


class Backend(ABC):
    """Abstract storage backend.

    Implementations must be thread-safe. A missing table or key is never an
    error: reads report absence, mutations of absent entries are no-ops.
    """

    @abstractmethod
    def tables(self) -> List[str]:
        """Return the sorted names of all tables holding data.

        The reserved system table is never included.
        """

    @abstractmethod
    def count_keys(self, table: str) -> int:
        """Return the number of keys in `table` (0 if absent)."""

    @abstractmethod
    def keys(self, table: str) -> List[str]:
        """Return the sorted keys of `table` (empty if absent)."""

    @abstractmethod
    def get(self, table: str, key: str) -> Tuple[bytes, bool]:
        """Return ``(data, True)``, or ``(b"", False)`` if table or key is absent."""

    @abstractmethod
    def set(self, table: str, key: str, data: bytes) -> None:
        """Store `data` under `key`, creating the table if needed."""

    @abstractmethod
    def unset(self, table: str, key: str) -> None:
        """Delete `key` from `table` if present."""

    @abstractmethod
    def drop(self, table: str) -> None:
        """Remove `table` and every table nested below it."""

    @abstractmethod
    def close(self) -> None:
        """Release resources. Calling close twice is allowed."""
