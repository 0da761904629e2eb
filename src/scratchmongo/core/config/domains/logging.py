"""Domain-specific configuration for scratchmongo's own logging."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level", "INFO") or "INFO")

    @cached_property
    def path(self) -> Path | None:
        raw = str(self.section.get("path", "") or "").strip()
        return Path(raw).expanduser() if raw else None


__all__ = ["LoggingConfig"]
