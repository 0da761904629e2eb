from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_READY_TIMEOUT_SECONDS = 10.0


class WatchdogConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "watchdog"

    @cached_property
    def poll_interval_seconds(self) -> float:
        return float(self.section.get("poll_interval_seconds") or DEFAULT_POLL_INTERVAL_SECONDS)

    @cached_property
    def ready_timeout_seconds(self) -> float:
        """Seconds to wait for a freshly spawned watchdog to report that it is watching."""
        return float(self.section.get("ready_timeout_seconds") or DEFAULT_READY_TIMEOUT_SECONDS)


__all__ = ["WatchdogConfig", "DEFAULT_POLL_INTERVAL_SECONDS", "DEFAULT_READY_TIMEOUT_SECONDS"]
