"""Contract shared by every backend; runs against memory and SQLite."""
from kvlite.namespace import SEP, SYSTEM_TABLE


def test_missing_table_and_key_are_not_errors(backend):
    assert backend.get('absent', 'k') == (b'', False)
    assert backend.keys('absent') == []
    assert backend.count_keys('absent') == 0
    backend.unset('absent', 'k')
    backend.drop('absent')


def test_set_overwrites_and_creates_table(backend):
    backend.set('t', 'k', b'\x00one')
    backend.set('t', 'k', b'\x00two')
    assert backend.get('t', 'k') == (b'\x00two', True)
    assert backend.tables() == ['t']
    assert backend.count_keys('t') == 1


def test_keys_sorted_and_counted(backend):
    for k in ['b', 'c', 'a']:
        backend.set('t', k, b'\x00' + k.encode())
    assert backend.keys('t') == ['a', 'b', 'c']
    assert backend.count_keys('t') == len(backend.keys('t'))


def test_drop_cascades_to_nested_tables_only(backend):
    for name in ['a', 'a' + SEP + 'x', 'a' + SEP + 'y' + SEP + 'z', 'ab', 'b']:
        backend.set(name, 'k', b'\x00v')
    backend.drop('a')
    assert backend.tables() == ['ab', 'b']


def test_drop_namespace_without_root_table(backend):
    backend.set('ns' + SEP + 't', 'k', b'\x00v')
    backend.set('ns2', 'k', b'\x00v')
    backend.drop('ns')
    assert backend.tables() == ['ns2']


def test_system_table_excluded_from_tables(backend):
    backend.set(SYSTEM_TABLE, 'lock', b'\x00{}')
    assert backend.tables() == []
    assert backend.keys(SYSTEM_TABLE) == ['lock']
    backend.drop(SYSTEM_TABLE)
    assert backend.get(SYSTEM_TABLE, 'lock') == (b'', False)


def test_binary_values_round_trip(backend):
    data = bytes(range(256))
    backend.set('t', 'bin', data)
    assert backend.get('t', 'bin') == (data, True)


def test_close_is_idempotent(backend):
    backend.set('t', 'k', b'\x00v')
    backend.close()
    backend.close()
