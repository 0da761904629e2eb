"""Domain-specific configuration for locating mongod and the mongo shell."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import List

from ..base import BaseDomainConfig

DEFAULT_CACHE_DIR = "~/.cache/scratchmongo"
DEFAULT_SHELL_CANDIDATES = ["mongosh", "mongo"]
DEFAULT_REPLICA_INIT_TIMEOUT_SECONDS = 30.0


class BinaryConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "binary"

    @cached_property
    def cache_dir(self) -> Path:
        raw = str(self.section.get("cache_dir") or DEFAULT_CACHE_DIR)
        return Path(raw).expanduser()

    @cached_property
    def shell_candidates(self) -> List[str]:
        names = self.section.get("shell_candidates")
        if isinstance(names, list):
            cleaned = [str(n).strip() for n in names if str(n).strip()]
            if cleaned:
                return cleaned
        return list(DEFAULT_SHELL_CANDIDATES)

    @cached_property
    def replica_init_timeout_seconds(self) -> float:
        return float(
            self.section.get("replica_init_timeout_seconds") or DEFAULT_REPLICA_INIT_TIMEOUT_SECONDS
        )


__all__ = ["BinaryConfig", "DEFAULT_CACHE_DIR", "DEFAULT_SHELL_CANDIDATES"]
