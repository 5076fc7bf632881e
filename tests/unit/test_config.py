import logging

import pytest
from pydantic import ValidationError

from kvlite.config import CONFIG_ENV, StoreConfig, load_config
from kvlite.logging_config import configure_logging


def test_defaults_when_file_missing(tmp_path):
    cfg = load_config(tmp_path / "missing.yml")
    assert cfg == StoreConfig()
    assert cfg.serializer == "pickle"
    assert cfg.kdf_iterations == 390000
    assert cfg.lock_timeout == 1.0


def test_load_from_yaml(tmp_path):
    p = tmp_path / "kvlite.yml"
    p.write_text("serializer: JSON\nkdf_iterations: 5000\nlog_level: debug\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.serializer == "json"
    assert cfg.kdf_iterations == 5000
    assert cfg.log_level == "DEBUG"


def test_env_var_selects_file(tmp_path, monkeypatch):
    p = tmp_path / "other.yml"
    p.write_text("lock_timeout: 3.5\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(p))
    assert load_config().lock_timeout == 3.5


def test_empty_file_gives_defaults(tmp_path):
    p = tmp_path / "kvlite.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == StoreConfig()


@pytest.mark.parametrize("body", ["serializer: msgpack\n", "kdf_iterations: 0\n", "log_level: LOUD\n"])
def test_invalid_values_rejected(tmp_path, body):
    p = tmp_path / "kvlite.yml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(p)


def test_non_mapping_rejected(tmp_path):
    p = tmp_path / "kvlite.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(p)


def test_configure_logging_uses_config_level(tmp_path):
    p = tmp_path / "kvlite.yml"
    p.write_text("log_level: INFO\n", encoding="utf-8")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(p)
        assert root.level == logging.INFO
    finally:
        for h in root.handlers[:]:
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
