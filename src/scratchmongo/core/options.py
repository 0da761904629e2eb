"""Launch options and their resolution into an immutable configuration.

``ServerOptions`` is what callers pass (every field optional);
``resolve_options`` fills the gaps from the ``server``/``binary``/``watchdog``
config domains and validates the combination before anything is spawned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from scratchmongo.core.config.domains import (
    BinaryConfig,
    FailurePatternConfig,
    ServerConfig,
    WatchdogConfig,
)
from scratchmongo.core.exceptions import ConfigurationError
from scratchmongo.core.utils.ports import find_free_port, is_valid_port

MONGOD_LOGGER_NAME = "scratchmongo.mongod"


class StorageEngine(str, Enum):
    """mongod storage engines, valued by their ``--storageEngine`` names."""

    EPHEMERAL = "ephemeralForTest"
    DURABLE = "wiredTiger"

    @classmethod
    def parse(cls, raw: Union["StorageEngine", str]) -> "StorageEngine":
        if isinstance(raw, StorageEngine):
            return raw
        key = str(raw).strip().lower()
        aliases = {
            "ephemeral": cls.EPHEMERAL,
            "ephemeralfortest": cls.EPHEMERAL,
            "durable": cls.DURABLE,
            "wiredtiger": cls.DURABLE,
        }
        if key not in aliases:
            raise ConfigurationError(
                f"Unknown storage engine: {raw!r} (expected 'ephemeral' or 'durable')",
                context={"storage_engine": str(raw)},
            )
        return aliases[key]


@dataclass(frozen=True)
class ServerOptions:
    """A partially-specified launch request.

    Attributes:
        version: MongoDB version, e.g. ``"6.0"``
        port: Port to listen on; 0 picks a free port
        storage_engine: ``"ephemeral"``/``"durable"`` (or the enum); None picks
            ephemeral for standalone servers and durable for replica sets
        use_replica: Start as a single-node replica set
        use_container: Launch through docker instead of a local binary
        startup_timeout: Seconds to wait for mongod to report readiness
        binary_path: Explicit mongod executable
        shell_path: Explicit mongosh/mongo executable for ``rs.initiate()``
        host: Host used in connection URIs
        logger: Sink for mongod output and lifecycle messages
        extra_args: Additional mongod arguments, appended last
    """

    version: Optional[str] = None
    port: int = 0
    storage_engine: Optional[Union[StorageEngine, str]] = None
    use_replica: bool = False
    use_container: bool = False
    startup_timeout: Optional[float] = None
    binary_path: Optional[Union[str, Path]] = None
    shell_path: Optional[Union[str, Path]] = None
    host: Optional[str] = None
    logger: Optional[logging.Logger] = None
    extra_args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedOptions:
    """Fully-resolved launch configuration. Immutable once built."""

    version: str
    port: int
    host: str
    storage_engine: StorageEngine
    use_replica: bool
    use_container: bool
    startup_timeout: float
    logger: logging.Logger
    binary_path: Optional[Path] = None
    shell_path: Optional[Path] = None
    replica_set_name: str = "rs0"
    bind_ip: str = "localhost"
    kill_timeout: float = 5.0
    watchdog_interval: float = 1.0
    watchdog_ready_timeout: float = 10.0
    replica_init_timeout: float = 30.0
    extra_args: Tuple[str, ...] = ()
    failure_patterns: Tuple[FailurePatternConfig, ...] = field(default_factory=tuple)


def resolve_options(
    options: Optional[ServerOptions] = None,
    *,
    config: Optional[Mapping[str, Any]] = None,
) -> ResolvedOptions:
    """Fill defaults into ``options`` and validate the result.

    Args:
        options: Caller request; None means "all defaults"
        config: Explicit configuration mapping (skips file/env loading)

    Raises:
        ConfigurationError: For invalid combinations, raised before any
            process is spawned.
    """
    opts = options or ServerOptions()
    server_cfg = ServerConfig(config)
    binary_cfg = BinaryConfig(config)
    watchdog_cfg = WatchdogConfig(config)

    if opts.use_replica and opts.use_container:
        raise ConfigurationError(
            "Replica mode and container mode cannot be used at the same time",
            context={"use_replica": True, "use_container": True},
        )

    raw_engine = opts.storage_engine or server_cfg.storage_engine
    if raw_engine is None:
        engine = StorageEngine.DURABLE if opts.use_replica else StorageEngine.EPHEMERAL
    else:
        engine = StorageEngine.parse(raw_engine)
    if opts.use_replica and engine is StorageEngine.EPHEMERAL:
        raise ConfigurationError(
            "Replica mode requires the durable storage engine",
            context={"storage_engine": engine.value},
        )

    host = (opts.host or server_cfg.host).strip()

    port = int(opts.port or 0)
    if port == 0:
        port = find_free_port(host)
    elif not is_valid_port(port):
        raise ConfigurationError(f"Invalid port: {port}", context={"port": port})

    timeout = float(opts.startup_timeout) if opts.startup_timeout is not None else server_cfg.startup_timeout_seconds
    if timeout <= 0:
        raise ConfigurationError(
            f"Startup timeout must be positive, got {timeout}",
            context={"startup_timeout": timeout},
        )

    version = str(opts.version).strip() if opts.version else server_cfg.version

    return ResolvedOptions(
        version=version,
        port=port,
        host=host,
        storage_engine=engine,
        use_replica=bool(opts.use_replica),
        use_container=bool(opts.use_container),
        startup_timeout=timeout,
        logger=opts.logger or logging.getLogger(MONGOD_LOGGER_NAME),
        binary_path=Path(opts.binary_path).expanduser() if opts.binary_path else None,
        shell_path=Path(opts.shell_path).expanduser() if opts.shell_path else None,
        replica_set_name=server_cfg.replica_set_name,
        bind_ip=server_cfg.bind_ip,
        kill_timeout=server_cfg.kill_timeout_seconds,
        watchdog_interval=watchdog_cfg.poll_interval_seconds,
        watchdog_ready_timeout=watchdog_cfg.ready_timeout_seconds,
        replica_init_timeout=binary_cfg.replica_init_timeout_seconds,
        extra_args=tuple(server_cfg.extra_args) + tuple(str(a) for a in opts.extra_args),
        failure_patterns=tuple(server_cfg.extra_failure_patterns),
    )


__all__ = [
    "MONGOD_LOGGER_NAME",
    "StorageEngine",
    "ServerOptions",
    "ResolvedOptions",
    "resolve_options",
]
