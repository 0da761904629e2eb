"""Domain-specific configuration accessors."""
from __future__ import annotations

from .binary import BinaryConfig
from .container import ContainerConfig
from .logging import LoggingConfig
from .server import FailurePatternConfig, ServerConfig
from .watchdog import WatchdogConfig

__all__ = [
    "BinaryConfig",
    "ContainerConfig",
    "FailurePatternConfig",
    "LoggingConfig",
    "ServerConfig",
    "WatchdogConfig",
]
