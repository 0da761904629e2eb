"""Caller-facing handle for a running mongod."""
from __future__ import annotations

import logging
import subprocess
import threading
from types import TracebackType
from typing import Any, Optional, Type

from scratchmongo.core.server.launcher import LaunchedProcess
from scratchmongo.core.utils.io import remove_tree
from scratchmongo.core.utils.names import random_database_name
from scratchmongo.core.utils.process import kill_process


class ServerHandle:
    """A started mongod, its watchdog, and its storage directory.

    ``stop`` kills the server and closes its output pipes, then kills the
    watchdog, then removes the storage directory. Each step is attempted
    even if an earlier one failed, and failures are logged as warnings
    rather than raised. Calling ``stop`` again is a no-op.
    """

    def __init__(
        self,
        *,
        port: int,
        host: str,
        launched: LaunchedProcess,
        watchdog: subprocess.Popen[Any],
        logger: logging.Logger,
        replica_set: Optional[str] = None,
        kill_timeout: float = 5.0,
    ) -> None:
        self.port = port
        self.host = host
        self.storage_dir = launched.storage_dir
        self.replica_set = replica_set
        self._launched = launched
        self._process = launched.process
        self._watchdog = watchdog
        self._logger = logger
        self._kill_timeout = kill_timeout
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def watchdog_pid(self) -> int:
        return self._watchdog.pid

    @property
    def stopped(self) -> bool:
        return self._stopped

    def uri(self) -> str:
        """``mongodb://<host>:<port>``"""
        return f"mongodb://{self.host}:{self.port}"

    def uri_with_random_db(self) -> str:
        """Like ``uri`` with a fresh random database name appended."""
        return f"{self.uri()}/{random_database_name()}"

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True

        try:
            kill_process(self._process, timeout_seconds=self._kill_timeout)
        except Exception as exc:
            self._logger.warning("error stopping mongod process pid=%s: %s", self.pid, exc)

        try:
            self._launched.release(self._kill_timeout)
        except Exception as exc:
            self._logger.warning("error closing mongod output pipes pid=%s: %s", self.pid, exc)

        try:
            kill_process(self._watchdog, timeout_seconds=self._kill_timeout)
        except Exception as exc:
            self._logger.warning("error stopping watchdog process pid=%s: %s", self.watchdog_pid, exc)

        try:
            remove_tree(self.storage_dir)
        except Exception as exc:
            self._logger.warning("error removing data directory %s: %s", self.storage_dir, exc)

        self._logger.debug("Stopped mongod on port %s", self.port)

    def __enter__(self) -> "ServerHandle":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.stop()

    def __repr__(self) -> str:
        state = "stopped" if self._stopped else "running"
        return f"ServerHandle(uri={self.uri()!r}, pid={self.pid}, {state})"


__all__ = ["ServerHandle"]
