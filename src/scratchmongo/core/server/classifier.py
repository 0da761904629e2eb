"""Classification of mongod startup output.

mongod reports readiness (and most startup failures) only on stdout, so the
classifier scans each line, relays it to the logging sink, and sets a one-shot
latch with the first recognizable outcome. Lines keep being logged after the
latch is set so the full run log is preserved.
"""
from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass
from enum import Enum
from typing import IO, Iterable, Iterator, Optional, Tuple

from scratchmongo.core.config.domains import FailurePatternConfig
from scratchmongo.core.exceptions import ConfigurationError
from scratchmongo.core.utils.ports import is_valid_port


class OutcomeKind(str, Enum):
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class StartupOutcome:
    """Terminal result of one startup attempt."""

    kind: OutcomeKind
    port: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def ready(cls, port: int) -> "StartupOutcome":
        return cls(kind=OutcomeKind.READY, port=port)

    @classmethod
    def failed(cls, reason: str) -> "StartupOutcome":
        return cls(kind=OutcomeKind.FAILED, reason=reason)

    @classmethod
    def timed_out(cls) -> "StartupOutcome":
        return cls(kind=OutcomeKind.TIMED_OUT, reason=TIMED_OUT_REASON)

    @property
    def is_ready(self) -> bool:
        return self.kind is OutcomeKind.READY


@dataclass(frozen=True)
class LogPattern:
    name: str
    regex: "re.Pattern[str]"
    reason: str


EXITED_REASON = "mongod process exited before startup completed"
TIMED_OUT_REASON = "mongod timed out waiting to start"
UNPARSABLE_PORT_REASON = "could not parse port from log line"

# Lines are lower-cased before matching;
# "port(\s|":)" covers both the legacy text log and the 4.4+ JSON log.
READY_PATTERN = re.compile(r"waiting for connections.*port(\s|\":)(\w+)")

FAILURE_PATTERNS: Tuple[LogPattern, ...] = (
    LogPattern("address_in_use", re.compile(r"addr(ess)? already in use"), "mongod startup failed, address in use"),
    LogPattern("already_running", re.compile(r"mongod already running"), "mongod startup failed, already running"),
    LogPattern(
        "permission_denied",
        re.compile(r"mongod permission denied"),
        "mongod startup failed, permission denied",
    ),
    LogPattern(
        "data_directory_not_found",
        re.compile(r"data directory .*? not found"),
        "mongod startup failed, data directory not found",
    ),
    LogPattern("shutting_down", re.compile(r"shutting down with code"), "mongod startup failed, server shut down"),
)


def build_patterns(extra: Iterable[FailurePatternConfig] = ()) -> Tuple[LogPattern, ...]:
    """Built-in failure patterns followed by configured ones."""
    patterns = list(FAILURE_PATTERNS)
    for idx, item in enumerate(extra):
        try:
            regex = re.compile(item.pattern.lower())
        except re.error as exc:
            raise ConfigurationError(
                f"Invalid extra failure pattern {item.pattern!r}: {exc}",
                context={"pattern": item.pattern},
            ) from exc
        patterns.append(LogPattern(f"extra_{idx}", regex, item.reason))
    return tuple(patterns)


def classify_line(line: str, patterns: Tuple[LogPattern, ...] = FAILURE_PATTERNS) -> Optional[StartupOutcome]:
    """Return the outcome a single output line implies, or None."""
    lowered = line.lower()

    match = READY_PATTERN.search(lowered)
    if match is not None:
        try:
            port = int(match.group(2))
        except ValueError:
            return StartupOutcome.failed(f"{UNPARSABLE_PORT_REASON}: {lowered}")
        if not is_valid_port(port):
            return StartupOutcome.failed(f"{UNPARSABLE_PORT_REASON}: {lowered}")
        return StartupOutcome.ready(port)

    for pattern in patterns:
        if pattern.regex.search(lowered):
            return StartupOutcome.failed(pattern.reason)
    return None


def iter_lines(stream: IO[str]) -> Iterator[str]:
    """Lazily yield lines from ``stream`` without trailing newlines."""
    for raw in iter(stream.readline, ""):
        yield raw.rstrip("\r\n")


class OutputClassifier:
    """Scan mongod stdout on a background thread and latch the first outcome.

    ``outcome`` is a ``concurrent.futures.Future`` that is resolved exactly
    once: by the first matching line, or with an "exited" failure when the
    stream closes first. Emission never blocks, so a caller that stopped
    waiting leaves nothing stuck behind.
    """

    def __init__(
        self,
        stream: IO[str],
        logger: logging.Logger,
        *,
        patterns: Tuple[LogPattern, ...] = FAILURE_PATTERNS,
        label: str = "mongod stdout",
    ) -> None:
        self._stream = stream
        self._logger = logger
        self._patterns = patterns
        self._label = label
        self.outcome: "Future[StartupOutcome]" = Future()
        self._thread = threading.Thread(
            target=self._run,
            name=f"scratchmongo-{label.replace(' ', '-')}",
            daemon=True,
        )

    def start(self) -> "OutputClassifier":
        self._thread.start()
        return self

    def _emit(self, outcome: StartupOutcome) -> bool:
        try:
            self.outcome.set_result(outcome)
        except InvalidStateError:
            return False
        return True

    def _run(self) -> None:
        try:
            for line in iter_lines(self._stream):
                self._logger.debug("[%s] %s", self._label, line)
                if self.outcome.done():
                    continue
                result = classify_line(line, self._patterns)
                if result is not None:
                    self._emit(result)
        except (OSError, ValueError) as exc:
            self._logger.warning("reading %s failed: %s", self._label, exc)
        finally:
            self._emit(StartupOutcome.failed(EXITED_REASON))

    def wait(self, timeout: Optional[float] = None) -> StartupOutcome:
        """Block until an outcome is latched.

        Raises:
            concurrent.futures.TimeoutError: If nothing was latched in time.
        """
        return self.outcome.result(timeout=timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread.is_alive():
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread.is_alive()


__all__ = [
    "EXITED_REASON",
    "FAILURE_PATTERNS",
    "LogPattern",
    "OutcomeKind",
    "OutputClassifier",
    "READY_PATTERN",
    "StartupOutcome",
    "TIMED_OUT_REASON",
    "UNPARSABLE_PORT_REASON",
    "build_patterns",
    "classify_line",
    "iter_lines",
]
