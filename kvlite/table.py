"""Focused table view binding one table name to a namespace."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Tuple

if TYPE_CHECKING:
    from kvlite.namespace import Namespace
    from kvlite.storage.serializer import Serializer


class Table:
    def __init__(self, namespace: "Namespace", name: str) -> None:
        self._namespace = namespace
        self.name = name

    def __repr__(self) -> str:
        return f"Table(name={self.name!r}, namespace={self._namespace!r})"

    def get(self, key: str, serializer: Optional["Serializer"] = None) -> Tuple[Any, bool]:
        return self._namespace.get(self.name, key, serializer)

    def set(self, key: str, value: Any, serializer: Optional["Serializer"] = None) -> None:
        self._namespace.set(self.name, key, value, serializer)

    def crypt_set(self, key: str, value: Any, serializer: Optional["Serializer"] = None) -> None:
        self._namespace.crypt_set(self.name, key, value, serializer)

    def keys(self) -> List[str]:
        return self._namespace.keys(self.name)

    def count_keys(self) -> int:
        return self._namespace.count_keys(self.name)

    def unset(self, key: str) -> None:
        self._namespace.unset(self.name, key)

    def drop(self) -> None:
        self._namespace.drop(self.name)
