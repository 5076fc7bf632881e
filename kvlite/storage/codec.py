"""Record codec: serialization, encryption and flag framing.

Every stored record is ``flag || payload``. Flag ``PLAIN`` means the payload
is the serialized value; flag ``ENCRYPTED`` means the payload is
``iv || AES-CFB(serialized value)`` under the store's master key. The flag
travels with each record, so encryption is chosen per write.
"""
from __future__ import annotations

import hashlib
import os
from typing import Any, Optional

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.decrepit.ciphers.modes import CFB

from kvlite.errors import CodecError
from .serializer import Serializer, get_serializer

PLAIN = 0
ENCRYPTED = 1
IV_SIZE = 16


def frame(flag: int, payload: bytes) -> bytes:
    return bytes((flag,)) + payload


def is_encrypted(record: bytes) -> bool:
    return bool(record) and record[0] == ENCRYPTED


def new_secret() -> bytes:
    """Generate fresh master secret material."""
    return hashlib.sha256(os.urandom(256)).digest()


class Codec:
    """Encodes values for one store.

    Holds the master secret and the default serializer. It never changes
    after construction, so one instance is shared by all threads using the
    store.
    """

    def __init__(self, secret: bytes, serializer: Optional[Serializer] = None) -> None:
        if not secret:
            raise ValueError("Codec requires secret material")
        self._key = hashlib.sha256(secret).digest()
        self.serializer = get_serializer(serializer)

    def encode(self, value: Any, serializer: Optional[Serializer] = None) -> bytes:
        return (serializer or self.serializer).dump(value)

    def decode(self, data: bytes, serializer: Optional[Serializer] = None) -> Any:
        """Deserialize `data`. Empty input decodes to None."""
        if not data:
            return None
        try:
            return (serializer or self.serializer).load(data)
        except Exception as e:
            raise CodecError(f"Could not decode stored value: {e}") from e

    def encrypt(self, data: bytes) -> bytes:
        iv = os.urandom(IV_SIZE)
        enc = Cipher(algorithms.AES(self._key), CFB(iv)).encryptor()
        return iv + enc.update(data) + enc.finalize()

    def decrypt(self, data: bytes) -> bytes:
        if len(data) < IV_SIZE:
            raise CodecError("Encrypted payload is truncated")
        dec = Cipher(algorithms.AES(self._key), CFB(data[:IV_SIZE])).decryptor()
        return dec.update(data[IV_SIZE:]) + dec.finalize()

    def pack(self, value: Any, encrypt: bool = False, serializer: Optional[Serializer] = None) -> bytes:
        payload = self.encode(value, serializer)
        if encrypt:
            return frame(ENCRYPTED, self.encrypt(payload))
        return frame(PLAIN, payload)

    def unpack(self, record: bytes, serializer: Optional[Serializer] = None) -> Any:
        if not record:
            return None
        flag, payload = record[0], record[1:]
        if flag == ENCRYPTED:
            payload = self.decrypt(payload)
        elif flag != PLAIN:
            raise CodecError(f"Unknown record flag: {flag}")
        return self.decode(payload, serializer)
