from __future__ import annotations

from typing import Any, Dict, Mapping


class ScratchMongoError(Exception):
    """Base exception for scratchmongo."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigurationError(ScratchMongoError, ValueError):
    """Raised when options or configuration files describe an invalid setup."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ScratchMongoError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class BinaryNotFoundError(ScratchMongoError, FileNotFoundError):
    """Raised when no mongod (or shell) executable can be resolved."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ScratchMongoError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class LaunchError(ScratchMongoError, RuntimeError):
    """Raised when the server process could not be started."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ScratchMongoError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class WatchdogError(LaunchError):
    """Raised when the watchdog process could not be started."""


class StartupError(ScratchMongoError, RuntimeError):
    """Raised when mongod reported (or implied) a failed startup."""

    def __init__(
        self,
        message: str = "",
        *,
        reason: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        self.reason = reason or message
        ctx.setdefault("reason", self.reason)
        ScratchMongoError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)


class StartupTimeoutError(StartupError, TimeoutError):
    """Raised when mongod did not report readiness before the deadline."""


class ReplicaInitError(StartupError):
    """Raised when ``rs.initiate()`` failed on an otherwise ready server."""


class ContainerError(ScratchMongoError, RuntimeError):
    """Raised for failures of the docker-based launch path."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ScratchMongoError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "ScratchMongoError",
    "ConfigurationError",
    "BinaryNotFoundError",
    "LaunchError",
    "WatchdogError",
    "StartupError",
    "StartupTimeoutError",
    "ReplicaInitError",
    "ContainerError",
]
