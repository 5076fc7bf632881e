"""Padlock protocol: master key sealing, validation and reset.

A store's master secret is generated once and kept in the reserved system
table, sealed with a wrapping key derived from the caller's padlock:

    wrapping key = PBKDF2-HMAC-SHA256("kvlite-padlock:" + padlock, salt)
    token        = Fernet(wrapping key).encrypt(master secret)

Opening with the wrong padlock (or none when one was set, or one when none
was set) fails to decrypt the token and raises `BadPadlockError`.

Resetting purges every encrypted record, then removes the lock state so the
next open generates a new master secret. The reset is marked in the system
table first; an interrupted reset is completed by the next open.
"""
from __future__ import annotations

import base64
import json
import logging
import os
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import BaseModel, ValidationError

from kvlite.errors import BadPadlockError, CodecError
from kvlite.namespace import SYSTEM_TABLE
from kvlite.storage.base import Backend
from kvlite.storage.codec import PLAIN, frame, is_encrypted, new_secret

logger = logging.getLogger(__name__)

RESET_KEY = "reset"
LOCK_KEY = "lock"
LOCK_VERSION = 1
SALT_SIZE = 16
DEFAULT_ITERATIONS = 390000

Padlock = Union[bytes, bytearray, str, None]


class LockState(BaseModel):
    """Persisted record needed to unlock the master secret on open."""

    version: int = LOCK_VERSION
    salt: str
    iterations: int
    token: str
    padlocked: bool = False


def padlock_bytes(padlock: Padlock) -> bytes:
    if padlock is None:
        return b""
    if isinstance(padlock, str):
        return padlock.encode("utf-8")
    return bytes(padlock)


def _wrapping_key(padlock: bytes, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return base64.urlsafe_b64encode(kdf.derive(b"kvlite-padlock:" + padlock))


def seal(secret: bytes, padlock: Padlock, iterations: int = DEFAULT_ITERATIONS) -> LockState:
    """Seal `secret` under `padlock` into a new lock state."""
    pw = padlock_bytes(padlock)
    salt = os.urandom(SALT_SIZE)
    token = Fernet(_wrapping_key(pw, salt, iterations)).encrypt(secret)
    return LockState(
        salt=base64.urlsafe_b64encode(salt).decode("ascii"),
        iterations=iterations,
        token=token.decode("ascii"),
        padlocked=bool(pw),
    )


def unseal(state: LockState, padlock: Padlock) -> bytes:
    """Recover the master secret from `state`, or raise `BadPadlockError`."""
    pw = padlock_bytes(padlock)
    salt = base64.urlsafe_b64decode(state.salt.encode("ascii"))
    key = _wrapping_key(pw, salt, state.iterations)
    try:
        return Fernet(key).decrypt(state.token.encode("ascii"))
    except InvalidToken:
        if state.padlocked and not pw:
            msg = "Database is padlocked but no padlock was given"
        elif not state.padlocked and pw:
            msg = "Database has no padlock"
        else:
            msg = "Padlock does not match this database"
        raise BadPadlockError(msg) from None


def _put_system(backend: Backend, key: str, payload: bytes) -> None:
    backend.set(SYSTEM_TABLE, key, frame(PLAIN, payload))


def load_lock_state(backend: Backend) -> Optional[LockState]:
    data, found = backend.get(SYSTEM_TABLE, LOCK_KEY)
    if not found:
        return None
    try:
        return LockState.model_validate_json(data[1:])
    except ValidationError as e:
        raise CodecError(f"Lock state record is corrupt: {e}") from e


def save_lock_state(backend: Backend, state: LockState) -> None:
    _put_system(backend, LOCK_KEY, state.model_dump_json().encode("utf-8"))


def unlock(backend: Backend, padlock: Padlock, iterations: int = DEFAULT_ITERATIONS) -> bytes:
    """Return the master secret for `backend`, creating one on first use."""
    state = load_lock_state(backend)
    if state is None:
        secret = new_secret()
        save_lock_state(backend, seal(secret, padlock, iterations))
        logger.info("Created new master key (padlocked=%s)", bool(padlock_bytes(padlock)))
        return secret
    return unseal(state, padlock)


def reset_pending(backend: Backend) -> bool:
    _, found = backend.get(SYSTEM_TABLE, RESET_KEY)
    return found


def purge(backend: Backend) -> int:
    """Delete every encrypted record and forget the master key.

    Returns the number of records removed.
    """
    _put_system(backend, RESET_KEY, json.dumps(True).encode("utf-8"))
    removed = 0
    for table in backend.tables():
        for key in backend.keys(table):
            data, found = backend.get(table, key)
            if found and is_encrypted(data):
                backend.unset(table, key)
                removed += 1
    # the marker goes last so an interrupted purge is resumed on open
    backend.unset(SYSTEM_TABLE, LOCK_KEY)
    backend.unset(SYSTEM_TABLE, RESET_KEY)
    logger.info("Encryption reset removed %d encrypted records", removed)
    return removed
