"""Centralized configuration caching.

All domain configs share a single loaded configuration per
(config file, config file mtime, SCRATCHMONGO_* environment) fingerprint, so
tests and long-running processes that mutate the environment or rewrite the
config file never see stale values.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .manager import ENV_PREFIX, ConfigManager, default_user_config_path

_config_cache: Dict[str, Dict[str, Any]] = {}


def _cache_key(user_config_path: Path) -> str:
    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX)
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]
    try:
        st = user_config_path.stat()
        file_fp = f"{st.st_mtime_ns}:{st.st_size}"
    except OSError:
        file_fp = "missing"
    return f"{user_config_path}|{file_fp}|{env_fp}"


def get_cached_config(user_config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Return the merged, validated configuration (cached)."""
    path = Path(user_config_path) if user_config_path else default_user_config_path()
    key = _cache_key(path)
    cached = _config_cache.get(key)
    if cached is None:
        cached = ConfigManager(user_config_path=path).load_config(validate=True)
        _config_cache[key] = cached
    return cached


def clear_config_cache() -> None:
    """Drop every cached configuration (useful for testing)."""
    _config_cache.clear()


__all__ = ["get_cached_config", "clear_config_cache"]
