import threading

import pytest

from kvlite.errors import StoreClosedError
from kvlite.namespace import SYSTEM_TABLE
from kvlite.storage.memory_backend import MemoryBackend, ReadWriteLock


def test_memory_basic_operations():
    m = MemoryBackend()

    # set/get
    m.set('t', 'k', b'\x00v')
    assert m.get('t', 'k') == (b'\x00v', True)

    # unset removes the key, and the table with its last key
    m.unset('t', 'k')
    assert m.get('t', 'k') == (b'', False)
    assert m.tables() == []

    # unset of absent table/key is a no-op
    m.unset('nope', 'k')


def test_memory_hides_system_table():
    m = MemoryBackend()
    m.set(SYSTEM_TABLE, 'lock', b'\x00{}')
    m.set('data', 'a', b'\x00x')
    assert m.tables() == ['data']
    assert m.get(SYSTEM_TABLE, 'lock') == (b'\x00{}', True)


def test_memory_close_clears_and_rejects_use():
    m = MemoryBackend()
    m.set('t', 'k', b'\x00v')
    m.close()
    m.close()
    with pytest.raises(StoreClosedError):
        m.get('t', 'k')
    with pytest.raises(StoreClosedError):
        m.set('t', 'k', b'\x00v')


def test_rwlock_allows_concurrent_readers():
    lock = ReadWriteLock()
    inside = threading.Barrier(2, timeout=5)

    def reader():
        with lock.read_lock():
            # both readers must be inside the lock at once to pass the barrier
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)
    assert not inside.broken


def test_rwlock_writer_excludes_readers():
    lock = ReadWriteLock()
    events = []

    def reader():
        with lock.read_lock():
            events.append('read')

    with lock.write_lock():
        t = threading.Thread(target=reader)
        t.start()
        t.join(0.1)
        assert events == []
    t.join(5)
    assert events == ['read']
