"""Launch mongod through the docker CLI.

This path has no log-based readiness detection: after ``docker run`` returns
it waits a fixed, configurable delay and assumes the server is up. Replica
mode is not supported here.
"""
from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import replace
from typing import Any, List, Mapping, Optional

from scratchmongo.core.config.domains import ContainerConfig
from scratchmongo.core.exceptions import ConfigurationError, ContainerError
from scratchmongo.core.options import ResolvedOptions, ServerOptions, resolve_options
from scratchmongo.core.utils.names import random_database_name

PULL_TIMEOUT_SECONDS = 600.0
COMMAND_TIMEOUT_SECONDS = 60.0


def _docker(docker: str, args: List[str], *, timeout: float) -> subprocess.CompletedProcess[str]:
    cmd = [docker, *args]
    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=max(0.1, timeout),
            check=False,
        )
    except FileNotFoundError as exc:
        raise ContainerError(f"docker not found: {docker}", context={"command": cmd}) from exc
    except subprocess.TimeoutExpired as exc:
        raise ContainerError(f"docker {args[0]} timed out", context={"command": cmd, "timeout": timeout}) from exc
    except OSError as exc:
        raise ContainerError(f"docker {args[0]} failed: {exc}", context={"command": cmd}) from exc
    if result.returncode != 0:
        msg = (result.stderr or result.stdout or "").strip()
        raise ContainerError(
            f"docker {args[0]} exit={result.returncode}: {msg}",
            context={"command": cmd, "exit_code": result.returncode},
        )
    return result


class ContainerHandle:
    """A mongod running inside a docker container."""

    def __init__(
        self,
        *,
        container_id: str,
        image: str,
        port: int,
        host: str,
        logger: logging.Logger,
        docker_binary: str = "docker",
    ) -> None:
        self.container_id = container_id
        self.image = image
        self.port = port
        self.host = host
        self._logger = logger
        self._docker = docker_binary
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def uri(self) -> str:
        return f"mongodb://{self.host}:{self.port}"

    def uri_with_random_db(self) -> str:
        return f"{self.uri()}/{random_database_name()}"

    def stop(self) -> None:
        """Force-remove the container. Failures are logged, never raised."""
        if self._stopped:
            return
        self._stopped = True
        try:
            _docker(self._docker, ["rm", "-f", self.container_id], timeout=COMMAND_TIMEOUT_SECONDS)
        except ContainerError as exc:
            self._logger.warning("error removing container %s: %s", self.container_id, exc)
            return
        self._logger.debug("Removed container %s", self.container_id)

    def __enter__(self) -> "ContainerHandle":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"ContainerHandle(uri={self.uri()!r}, container={self.container_id[:12]!r})"


def start_resolved_container(
    resolved: ResolvedOptions,
    *,
    config: Optional[Mapping[str, Any]] = None,
) -> ContainerHandle:
    """Pull the image, run it with host networking, then wait the fixed delay.

    Raises:
        ConfigurationError: If replica mode was requested.
        ContainerError: If any docker command failed.
    """
    if resolved.use_replica:
        raise ConfigurationError(
            "Replica mode and container mode cannot be used at the same time",
            context={"use_replica": True, "use_container": True},
        )

    cfg = ContainerConfig(config)
    image = cfg.image_for(resolved.version)
    log = resolved.logger

    log.info("Pulling image %s", image)
    _docker(cfg.docker_binary, ["pull", image], timeout=PULL_TIMEOUT_SECONDS)

    run = _docker(
        cfg.docker_binary,
        ["run", "-d", "--rm", "--network", "host", image, "--port", str(resolved.port)],
        timeout=COMMAND_TIMEOUT_SECONDS,
    )
    lines = (run.stdout or "").strip().splitlines()
    container_id = lines[-1].strip() if lines else ""
    if not container_id:
        raise ContainerError("docker run did not report a container id", context={"image": image})

    handle = ContainerHandle(
        container_id=container_id,
        image=image,
        port=resolved.port,
        host=resolved.host,
        logger=log,
        docker_binary=cfg.docker_binary,
    )
    log.debug("Started container %s; waiting %.1fs", container_id, cfg.startup_delay_seconds)
    time.sleep(cfg.startup_delay_seconds)
    return handle


def start_container(version: Optional[str] = None, *, config: Optional[Mapping[str, Any]] = None) -> ContainerHandle:
    """Start ``mongo:<version>`` with default options."""
    return start_container_with_options(ServerOptions(version=version), config=config)


def start_container_with_options(
    options: Optional[ServerOptions] = None,
    *,
    config: Optional[Mapping[str, Any]] = None,
) -> ContainerHandle:
    opts = replace(options or ServerOptions(), use_container=True)
    return start_resolved_container(resolve_options(opts, config=config), config=config)


__all__ = [
    "ContainerHandle",
    "start_container",
    "start_container_with_options",
    "start_resolved_container",
]
