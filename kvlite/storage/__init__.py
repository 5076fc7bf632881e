"""Storage backends and record codec for kvlite."""

from .base import Backend
from .codec import Codec
from .memory_backend import MemoryBackend
from .serializer import JSONSerializer, PickleSerializer, Serializer, YAMLSerializer, get_serializer
from .sqlite_backend import SQLiteBackend

__all__ = [
    "Backend",
    "Codec",
    "MemoryBackend",
    "SQLiteBackend",
    "Serializer",
    "PickleSerializer",
    "JSONSerializer",
    "YAMLSerializer",
    "get_serializer",
]
