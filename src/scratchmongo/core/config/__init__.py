"""Layered configuration for scratchmongo.

Bundled defaults < user config file < SCRATCHMONGO_* environment overrides,
validated against the bundled JSON schema.
"""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_config_cache, get_cached_config
from .manager import CONFIG_PATH_ENV, MONGOD_BIN_ENV, ConfigManager, default_user_config_path

__all__ = [
    "BaseDomainConfig",
    "ConfigManager",
    "CONFIG_PATH_ENV",
    "MONGOD_BIN_ENV",
    "clear_config_cache",
    "default_user_config_path",
    "get_cached_config",
]
