"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def fast_config():
    # Low KDF cost keeps padlock tests quick; short lock wait keeps contention tests quick
    from kvlite.config import StoreConfig
    return StoreConfig(kdf_iterations=1000, lock_timeout=0.2)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path, fast_config):
    from kvlite import mem_store, open_store

    if request.param == "memory":
        s = mem_store()
    else:
        s = open_store(tmp_path / "store.db", config=fast_config)
    yield s
    s.close()


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    from kvlite.storage import MemoryBackend, SQLiteBackend

    if request.param == "memory":
        b = MemoryBackend()
    else:
        b = SQLiteBackend(tmp_path / "backend.db", lock_timeout=0.2)
    yield b
    b.close()
