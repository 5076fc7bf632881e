"""Configuration for kvlite stores.

Settings come from an optional YAML file, validated into a `StoreConfig`.
The file path defaults to ``kvlite.yml`` and can be overridden with the
``KVLITE_CONFIG`` environment variable. A missing file yields the defaults.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("kvlite.yml")
CONFIG_ENV = "KVLITE_CONFIG"


class StoreConfig(BaseModel):
    serializer: str = "pickle"
    kdf_iterations: int = Field(default=390000, ge=1)
    lock_timeout: float = Field(default=1.0, ge=0)
    busy_timeout: float = Field(default=5.0, ge=0)
    log_level: str = "WARNING"

    @field_validator("serializer")
    @classmethod
    def _known_serializer(cls, v: str) -> str:
        from kvlite.storage.serializer import SERIALIZERS

        v = v.lower()
        if v not in SERIALIZERS:
            raise ValueError(f"unknown serializer {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"unknown log level {v!r}")
        return v


def config_path(path: Union[str, Path, None] = None) -> Path:
    if path is not None:
        return Path(path)
    env = os.environ.get(CONFIG_ENV)
    return Path(env) if env else DEFAULT_CONFIG_PATH


def load_config(path: Union[str, Path, None] = None) -> StoreConfig:
    """Load a `StoreConfig` from YAML, falling back to defaults if absent."""
    cfg_path = config_path(path)
    if not cfg_path.exists():
        logger.debug("No config at %s, using defaults", cfg_path)
        return StoreConfig()
    with cfg_path.open("r", encoding="utf-8") as f:
        data: Optional[dict] = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {cfg_path} must contain a mapping")
    logger.debug("Loaded config from %s", cfg_path)
    return StoreConfig(**data)
