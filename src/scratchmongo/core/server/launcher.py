"""Spawn a mongod child process with its output wired to the classifier."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

from scratchmongo.core.exceptions import ConfigurationError, LaunchError
from scratchmongo.core.options import ResolvedOptions
from scratchmongo.core.server.classifier import OutputClassifier, build_patterns
from scratchmongo.core.server.relay import StreamRelay
from scratchmongo.core.utils.io import remove_tree
from scratchmongo.core.utils.process import kill_process

logger = logging.getLogger(__name__)

RELEASE_TIMEOUT_SECONDS = 5.0


@dataclass
class LaunchedProcess:
    """A running mongod plus the threads draining its output."""

    process: subprocess.Popen[Any]
    storage_dir: Path
    classifier: OutputClassifier
    relay: StreamRelay

    @property
    def pid(self) -> int:
        return self.process.pid

    def release(self, timeout: float = RELEASE_TIMEOUT_SECONDS) -> None:
        """Join the reader threads and close both pipes.

        Call once the process is dead. A pipe whose reader is still blocked
        (a grandchild may hold the write end) is left open.
        """
        readers = ((self.classifier, self.process.stdout), (self.relay, self.process.stderr))
        for reader, stream in readers:
            reader.join(timeout)
            if stream is None or stream.closed:
                continue
            if reader.running:
                logger.warning("Reader for mongod pid=%s still running; leaving its pipe open", self.pid)
                continue
            stream.close()


def build_command(binary: Path, resolved: ResolvedOptions, storage_dir: Path) -> List[str]:
    """Return the mongod argv for ``resolved``.

    Replica mode adds ``--replSet`` and ``--bind_ip``; configured extra
    arguments always come last.
    """
    cmd = [
        str(binary),
        "--storageEngine",
        resolved.storage_engine.value,
        "--dbpath",
        str(storage_dir),
        "--port",
        str(resolved.port),
    ]
    if resolved.use_replica:
        cmd += ["--replSet", resolved.replica_set_name, "--bind_ip", resolved.bind_ip]
    cmd += list(resolved.extra_args)
    return cmd


def launch(binary: Path, resolved: ResolvedOptions, storage_dir: Path) -> LaunchedProcess:
    """Start mongod and begin classifying its stdout.

    The storage directory is removed if the process cannot be spawned
    or the configured failure patterns do not compile.

    Raises:
        LaunchError: If the executable could not be started.
    """
    cmd = build_command(binary, resolved, storage_dir)
    try:
        patterns = build_patterns(resolved.failure_patterns)
    except ConfigurationError:
        remove_tree(storage_dir)
        raise
    logger.debug("Launching mongod: %s", " ".join(cmd))
    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        remove_tree(storage_dir)
        raise LaunchError(
            f"Failed to start mongod at {binary}: {exc}",
            context={"binary": str(binary), "command": cmd},
        ) from exc

    if proc.stdout is None or proc.stderr is None:
        kill_process(proc)
        remove_tree(storage_dir)
        raise LaunchError("mongod output is not piped", context={"binary": str(binary), "command": cmd})
    classifier = OutputClassifier(proc.stdout, resolved.logger, patterns=patterns).start()
    relay = StreamRelay(proc.stderr, resolved.logger).start()
    return LaunchedProcess(process=proc, storage_dir=storage_dir, classifier=classifier, relay=relay)


__all__ = ["LaunchedProcess", "build_command", "launch"]
