"""Base class for domain-specific configuration accessors.

Provides a standardized pattern for all domain configs with:
- Centralized caching via cache.py
- Type-safe section access
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .cache import get_cached_config


class BaseDomainConfig(ABC):
    """Abstract base class for domain-specific configuration accessors.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("my_setting", "default")

        cfg = MyConfig()
        print(cfg.my_setting)

    Passing ``config`` bypasses file/env loading entirely, which keeps unit
    tests independent of the developer's own configuration.
    """

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        user_config_path: Optional[Path] = None,
    ) -> None:
        if config is not None:
            self._config: Mapping[str, Any] = config
        else:
            self._config = get_cached_config(user_config_path=user_config_path)

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """Get this domain's configuration section (empty dict if missing)."""
        return dict(self._config.get(self._config_section(), {}) or {})


__all__ = ["BaseDomainConfig"]
