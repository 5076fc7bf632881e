"""Namespace routing over a flat table space.

The storage engines only know a flat set of named tables. Nested namespaces
are emulated by prefixing table names: a namespace is a string prefix that
ends in the reserved separator ``SEP``. A sub-namespace appends
``name + SEP`` to its parent's prefix, and shared buckets live under the
well-known ``SHARED_ROOT`` prefix so independent callers converge on the same
tables.

All prefix construction and parsing happens here. Backends use
``in_subtree`` for cascading drops; ``Namespace`` uses the rest.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Tuple

from kvlite.errors import InvalidNameError
from kvlite.table import Table

if TYPE_CHECKING:
    from kvlite.storage.serializer import Serializer
    from kvlite.store import Store

SEP = "\x1f"
SHARED_ROOT = "__shared__"
SYSTEM_TABLE = "__kvlite__"


def validate_name(name: Any, *, root: bool = False) -> str:
    """Return `name` if it may be used as a table or namespace name.

    Raises `InvalidNameError` for non-strings, empty names, names that
    contain the separator and names that are not valid UTF-8 text. At the
    root the system table name is reserved, both as a table and as a
    namespace.
    """
    if not isinstance(name, str) or not name:
        raise InvalidNameError(f"Invalid name: {name!r}")
    if SEP in name:
        raise InvalidNameError(f"Name {name!r} contains the reserved separator")
    if root and name == SYSTEM_TABLE:
        raise InvalidNameError(f"Name {name!r} is reserved")
    _check_utf8(name, "Name")
    return name


def validate_key(key: Any) -> str:
    if not isinstance(key, str):
        raise InvalidNameError(f"Invalid key: {key!r}")
    _check_utf8(key, "Key")
    return key


def _check_utf8(s: str, what: str) -> None:
    # lone surrogates are valid str but cannot be stored by every backend
    try:
        s.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidNameError(f"{what} {s!r} is not valid UTF-8 text") from None


def qualify(prefix: str, table: str) -> str:
    return prefix + validate_name(table, root=not prefix)


def child_prefix(prefix: str, name: str) -> str:
    return prefix + validate_name(name, root=not prefix) + SEP


def shared_prefix(name: str) -> str:
    return SHARED_ROOT + SEP + validate_name(name) + SEP


def in_subtree(name: str, root: str) -> bool:
    """True if `name` is `root` itself or any table nested below it."""
    return name == root or name.startswith(root + SEP)


def direct_tables(names: Iterable[str], prefix: str) -> List[str]:
    """Tables directly under `prefix`, with the prefix stripped."""
    out = []
    for name in names:
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix):]
        if rest and SEP not in rest:
            out.append(rest)
    return sorted(out)


def sub_namespaces(names: Iterable[str], prefix: str, limit_depth: bool = True) -> List[str]:
    """Namespaced tables below `prefix`, with the prefix stripped.

    With `limit_depth` each entry is collapsed to its first path segment so a
    namespace holding many tables is listed once.
    """
    seen = set()
    for name in names:
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix):]
        if SEP not in rest:
            continue
        if limit_depth:
            rest = rest.split(SEP, 1)[0]
        seen.add(rest)
    return sorted(seen)


class Namespace:
    """Table-oriented view of a store under a fixed prefix.

    Every table-qualified call rewrites ``table`` to ``prefix + table`` before
    it reaches the backend. The root store is a namespace with an empty prefix.
    """

    def __init__(self, store: "Store", prefix: str = "") -> None:
        self._store = store
        self.prefix = prefix

    def __repr__(self) -> str:
        return f"Namespace(prefix={self.prefix!r})"

    def _qualify(self, table: str) -> str:
        return qualify(self.prefix, table)

    def sub(self, name: str) -> "Namespace":
        """Return a namespace nested below this one."""
        return Namespace(self._store, child_prefix(self.prefix, name))

    def bucket(self, name: str) -> "Namespace":
        """Return the shared namespace `name`, independent of this prefix."""
        return Namespace(self._store, shared_prefix(name))

    def table(self, name: str) -> Table:
        self._qualify(name)
        return Table(self, name)

    def tables(self) -> List[str]:
        return direct_tables(self._store.backend.tables(), self.prefix)

    def namespaces(self, limit_depth: bool = True) -> List[str]:
        return sub_namespaces(self._store.backend.tables(), self.prefix, limit_depth)

    def drop(self, table: str) -> None:
        self._store.backend.drop(self._qualify(table))

    def count_keys(self, table: str) -> int:
        return self._store.backend.count_keys(self._qualify(table))

    def keys(self, table: str) -> List[str]:
        return self._store.backend.keys(self._qualify(table))

    def set(self, table: str, key: str, value: Any, serializer: Optional["Serializer"] = None) -> None:
        self._store.write(self._qualify(table), validate_key(key), value, False, serializer)

    def crypt_set(self, table: str, key: str, value: Any, serializer: Optional["Serializer"] = None) -> None:
        self._store.write(self._qualify(table), validate_key(key), value, True, serializer)

    def unset(self, table: str, key: str) -> None:
        self._store.backend.unset(self._qualify(table), validate_key(key))

    def get(self, table: str, key: str, serializer: Optional["Serializer"] = None) -> Tuple[Any, bool]:
        """Return ``(value, found)``; ``(None, False)`` when absent."""
        return self._store.read(self._qualify(table), validate_key(key), serializer)

    def close(self) -> None:
        self._store.close()
