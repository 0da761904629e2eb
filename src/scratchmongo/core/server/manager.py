"""Start ephemeral mongod servers.

``start_with_options`` runs the whole pipeline:

1. resolve options (fails before anything is spawned)
2. locate the mongod binary (and the shell for replica mode)
3. create the storage directory and spawn mongod
4. spawn the watchdog guarding mongod on behalf of this process
5. wait for mongod to report readiness, bounded by the startup timeout
6. initiate the replica set when requested
7. hand back a ``ServerHandle``

Any failure from step 3 on unwinds everything spawned so far before the
error propagates.
"""
from __future__ import annotations

import time
from typing import Any, Mapping, Optional, Union, cast

from scratchmongo.core.binary import resolve_binary, resolve_shell_binary
from scratchmongo.core.exceptions import ReplicaInitError, WatchdogError
from scratchmongo.core.options import ServerOptions, resolve_options
from scratchmongo.core.server.container import ContainerHandle, start_resolved_container
from scratchmongo.core.server.coordinator import StartupCoordinator
from scratchmongo.core.server.handle import ServerHandle
from scratchmongo.core.server.launcher import launch
from scratchmongo.core.server.replica import initiate_replica_set
from scratchmongo.core.server.watchdog import spawn_watchdog
from scratchmongo.core.utils.io import create_storage_directory
from scratchmongo.core.utils.process import current_pid, process_create_time


def start(version: Optional[str] = None, *, config: Optional[Mapping[str, Any]] = None) -> ServerHandle:
    """Start a standalone mongod of ``version`` with default options."""
    # Container mode is only ever requested through ServerOptions.
    return cast(ServerHandle, start_with_options(ServerOptions(version=version), config=config))


def start_with_options(
    options: Optional[ServerOptions] = None,
    *,
    config: Optional[Mapping[str, Any]] = None,
) -> Union[ServerHandle, ContainerHandle]:
    """Start mongod as described by ``options``.

    Returns a ``ContainerHandle`` when ``options.use_container`` is set and a
    ``ServerHandle`` otherwise; both expose ``port``, ``uri()`` and ``stop()``.

    Raises:
        ConfigurationError: Invalid options; nothing was spawned.
        BinaryNotFoundError: No mongod (or shell, in replica mode) was found.
        LaunchError: mongod or the watchdog could not be spawned.
        StartupError: mongod reported a failure, exited, timed out
            (``StartupTimeoutError``), or replica initiation failed
            (``ReplicaInitError``).
    """
    resolved = resolve_options(options, config=config)
    mongod_log = resolved.logger
    mongod_log.info(
        "Starting MongoDB %s on port %s (engine=%s, replica=%s, container=%s)",
        resolved.version,
        resolved.port,
        resolved.storage_engine.value,
        resolved.use_replica,
        resolved.use_container,
    )

    if resolved.use_container:
        return start_resolved_container(resolved, config=config)

    binary = resolve_binary(resolved.version, explicit_path=resolved.binary_path, config=config)
    mongod_log.debug("Using binary %s", binary)
    shell = None
    if resolved.use_replica:
        shell = resolve_shell_binary(explicit_path=resolved.shell_path, config=config)
        mongod_log.debug("Using shell %s", shell)

    storage_dir = create_storage_directory()
    mongod_log.debug("Starting mongod")
    launched = launch(binary, resolved, storage_dir)

    mongod_log.debug("Started mongod; starting watcher")
    coordinator = StartupCoordinator(launched, timeout=resolved.startup_timeout, kill_timeout=resolved.kill_timeout)
    try:
        owner = current_pid()
        watchdog = spawn_watchdog(
            owner,
            launched.pid,
            poll_interval=resolved.watchdog_interval,
            parent_create_time=process_create_time(owner),
            ready_timeout=resolved.watchdog_ready_timeout,
        )
    except WatchdogError:
        coordinator.unwind()
        raise
    coordinator.watchdog = watchdog

    mongod_log.debug("Started watcher; waiting for mongod to report port number")
    started_at = time.monotonic()
    try:
        port = coordinator.await_ready()
    except KeyboardInterrupt:
        coordinator.unwind()
        raise
    mongod_log.debug(
        "mongod started up and reported port %s after %.3fs",
        port,
        time.monotonic() - started_at,
    )

    if shell is not None:
        try:
            initiate_replica_set(shell, port, mongod_log, timeout=resolved.replica_init_timeout)
        except ReplicaInitError:
            coordinator.unwind()
            raise
        mongod_log.debug("Initiated replica set %s", resolved.replica_set_name)

    return ServerHandle(
        port=port,
        host=resolved.host,
        launched=launched,
        watchdog=watchdog,
        logger=mongod_log,
        replica_set=resolved.replica_set_name if resolved.use_replica else None,
        kill_timeout=resolved.kill_timeout,
    )


__all__ = ["start", "start_with_options"]
