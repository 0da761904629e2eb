"""Race the startup outcome against a deadline and unwind on failure."""
from __future__ import annotations

import concurrent.futures
import logging
import subprocess
from enum import Enum
from typing import Any, Optional

from scratchmongo.core.exceptions import StartupError, StartupTimeoutError
from scratchmongo.core.server.classifier import OutcomeKind, StartupOutcome
from scratchmongo.core.server.launcher import LaunchedProcess
from scratchmongo.core.utils.io import remove_tree
from scratchmongo.core.utils.process import kill_process

logger = logging.getLogger(__name__)


class StartupState(str, Enum):
    LAUNCHING = "launching"
    WAITING = "waiting"
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class StartupCoordinator:
    """Owns one startup attempt from spawn until ready or torn down.

    ``await_ready`` returns the listening port or raises; on any failure the
    mongod process is killed and its storage directory removed before the
    error propagates. Cleanup is best-effort and never replaces the original
    error.
    """

    def __init__(
        self,
        launched: LaunchedProcess,
        *,
        timeout: float,
        kill_timeout: float = 5.0,
        watchdog: Optional[subprocess.Popen[Any]] = None,
    ) -> None:
        self.launched = launched
        self.timeout = timeout
        self.kill_timeout = kill_timeout
        self.watchdog = watchdog
        self.state = StartupState.LAUNCHING
        self.outcome: Optional[StartupOutcome] = None

    def wait_for_outcome(self) -> StartupOutcome:
        """Block until the first outcome or the deadline, whichever comes first."""
        self.state = StartupState.WAITING
        try:
            outcome = self.launched.classifier.wait(self.timeout)
        except concurrent.futures.TimeoutError:
            outcome = StartupOutcome.timed_out()
        self.outcome = outcome
        self.state = {
            OutcomeKind.READY: StartupState.READY,
            OutcomeKind.FAILED: StartupState.FAILED,
            OutcomeKind.TIMED_OUT: StartupState.TIMED_OUT,
        }[outcome.kind]
        return outcome

    def await_ready(self) -> int:
        """Return the port mongod reported, or unwind and raise.

        Raises:
            StartupTimeoutError: If the deadline passed first.
            StartupError: If mongod reported a failure or exited.
        """
        outcome = self.wait_for_outcome()
        if outcome.is_ready and outcome.port is not None:
            return outcome.port

        reason = outcome.reason or "mongod failed to start"
        self.unwind()
        context = {"pid": self.launched.pid, "storage_dir": str(self.launched.storage_dir)}
        if outcome.kind is OutcomeKind.TIMED_OUT:
            context["timeout"] = self.timeout
            raise StartupTimeoutError(reason, reason=reason, context=context)
        raise StartupError(reason, reason=reason, context=context)

    def unwind(self) -> None:
        """Kill the watchdog and mongod, close its pipes, then remove the storage directory.

        Every step is attempted; failures are logged as warnings.
        """
        if self.watchdog is not None:
            try:
                kill_process(self.watchdog, timeout_seconds=self.kill_timeout)
            except Exception as exc:
                logger.warning("Failed to stop watchdog pid=%s: %s", self.watchdog.pid, exc)
        try:
            kill_process(self.launched.process, timeout_seconds=self.kill_timeout)
        except Exception as exc:
            logger.warning("Failed to kill mongod pid=%s: %s", self.launched.pid, exc)
        try:
            self.launched.release(self.kill_timeout)
        except Exception as exc:
            logger.warning("Failed to close mongod output pipes pid=%s: %s", self.launched.pid, exc)
        try:
            remove_tree(self.launched.storage_dir)
        except Exception as exc:
            logger.warning("Failed to remove storage directory %s: %s", self.launched.storage_dir, exc)


__all__ = ["StartupCoordinator", "StartupState"]
