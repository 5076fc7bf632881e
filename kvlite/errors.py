"""Exception types raised by kvlite.

Absence of a table or key is never an error; these cover contention,
authentication, engine failures, malformed data and caller mistakes.
"""


class KVLiteError(Exception):
    """Base class for all kvlite errors."""


class StoreLockedError(KVLiteError):
    """Another instance holds the exclusive lock on the database file."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Database {path} is currently in use by an existing instance, "
            "please close it and try again."
        )
        self.path = path


class BadPadlockError(KVLiteError):
    """The supplied padlock does not unlock the stored master key."""


class StorageError(KVLiteError):
    """The underlying storage engine failed."""


class StoreClosedError(KVLiteError):
    """Operation attempted on a closed store."""


class CodecError(KVLiteError, ValueError):
    """Stored bytes could not be decoded."""


class InvalidNameError(KVLiteError, ValueError):
    """A table or namespace name is empty, reserved or contains the separator."""
