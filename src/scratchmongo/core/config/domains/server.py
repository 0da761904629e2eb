"""Domain-specific configuration for mongod launches.

Provides cached access to the defaults used when a caller leaves fields of
``ServerOptions`` unset.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import List

from ..base import BaseDomainConfig

DEFAULT_VERSION = "6.0"
DEFAULT_HOST = "localhost"
DEFAULT_STARTUP_TIMEOUT_SECONDS = 60.0
DEFAULT_REPLICA_SET_NAME = "rs0"
DEFAULT_BIND_IP = "localhost"
DEFAULT_KILL_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class FailurePatternConfig:
    pattern: str
    reason: str


class ServerConfig(BaseDomainConfig):
    """Domain-specific configuration accessor for the ``server`` section."""

    def _config_section(self) -> str:
        return "server"

    @cached_property
    def version(self) -> str:
        raw = self.section.get("version")
        if raw is None or not str(raw).strip():
            return DEFAULT_VERSION
        return str(raw).strip()

    @cached_property
    def host(self) -> str:
        return str(self.section.get("host") or DEFAULT_HOST)

    @cached_property
    def storage_engine(self) -> str | None:
        """Configured engine name (``ephemeral``/``durable``) or None for automatic."""
        raw = str(self.section.get("storage_engine") or "").strip().lower()
        return raw or None

    @cached_property
    def startup_timeout_seconds(self) -> float:
        return float(self.section.get("startup_timeout_seconds") or DEFAULT_STARTUP_TIMEOUT_SECONDS)

    @cached_property
    def replica_set_name(self) -> str:
        return str(self.section.get("replica_set_name") or DEFAULT_REPLICA_SET_NAME)

    @cached_property
    def bind_ip(self) -> str:
        return str(self.section.get("bind_ip") or DEFAULT_BIND_IP)

    @cached_property
    def kill_timeout_seconds(self) -> float:
        return float(self.section.get("kill_timeout_seconds") or DEFAULT_KILL_TIMEOUT_SECONDS)

    @cached_property
    def extra_args(self) -> List[str]:
        args = self.section.get("extra_args")
        if isinstance(args, list):
            return [str(a) for a in args]
        return []

    @cached_property
    def extra_failure_patterns(self) -> List[FailurePatternConfig]:
        raw = self.section.get("extra_failure_patterns")
        if not isinstance(raw, list):
            return []
        patterns: List[FailurePatternConfig] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            pattern = str(item.get("pattern") or "").strip()
            reason = str(item.get("reason") or "").strip()
            if pattern and reason:
                patterns.append(FailurePatternConfig(pattern=pattern, reason=reason))
        return patterns


__all__ = [
    "ServerConfig",
    "FailurePatternConfig",
    "DEFAULT_VERSION",
    "DEFAULT_HOST",
    "DEFAULT_STARTUP_TIMEOUT_SECONDS",
    "DEFAULT_REPLICA_SET_NAME",
    "DEFAULT_BIND_IP",
    "DEFAULT_KILL_TIMEOUT_SECONDS",
]
