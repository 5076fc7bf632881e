from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class TableStore(Protocol):
    """Table-oriented surface shared by `Store` and `Namespace`.

    Values are Python objects; `get` returns ``(value, found)`` and never
    raises for a missing table or key.
    """

    def tables(self) -> List[str]: ...

    def table(self, name: str) -> Any: ...

    def sub(self, name: str) -> "TableStore": ...

    def bucket(self, name: str) -> "TableStore": ...

    def namespaces(self, limit_depth: bool = True) -> List[str]: ...

    def drop(self, table: str) -> None: ...

    def count_keys(self, table: str) -> int: ...

    def keys(self, table: str) -> List[str]: ...

    def set(self, table: str, key: str, value: Any, serializer: Optional[Any] = None) -> None: ...

    def crypt_set(self, table: str, key: str, value: Any, serializer: Optional[Any] = None) -> None: ...

    def unset(self, table: str, key: str) -> None: ...

    def get(self, table: str, key: str, serializer: Optional[Any] = None) -> Tuple[Any, bool]: ...

    def close(self) -> None: ...
