"""Value serializers for record payloads.

A serializer turns a caller's value into the bytes that follow the flag
byte of a record, and back. Stores pick one by name (``pickle``, ``json``,
``yaml``) or accept any object with `dump`/`load`.
"""
from typing import Any, Dict, Protocol, Union
import pickle
import json
import yaml


class Serializer(Protocol):
    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class PickleSerializer:
    """Stores any picklable Python object; the default for new stores.

    Payloads are only readable from Python.
    """

    def dump(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


class JSONSerializer:
    """UTF-8 JSON payloads. Values outside the JSON data model raise TypeError."""

    def dump(self, value: Any) -> bytes:
        return json.dumps(value).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """YAML payloads via ``safe_dump``/``safe_load``; plain data types only."""

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(value).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


SERIALIZERS: Dict[str, type] = {
    "pickle": PickleSerializer,
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
}


def get_serializer(name_or_instance: Union[str, Serializer, None] = None) -> Serializer:
    """Resolve a serializer by name; instances pass through, None means pickle."""
    if name_or_instance is None:
        return PickleSerializer()
    if isinstance(name_or_instance, str):
        try:
            return SERIALIZERS[name_or_instance.lower()]()
        except KeyError:
            raise ValueError(f"Unknown serializer: {name_or_instance!r}") from None
    return name_or_instance
