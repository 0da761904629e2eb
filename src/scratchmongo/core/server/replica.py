"""Single-node replica set initialization through the mongo shell."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from scratchmongo.core.exceptions import ReplicaInitError

INITIATE_SCRIPT = "rs.initiate()"


def build_initiate_command(shell: Path, port: int) -> List[str]:
    return [str(shell), "--port", str(port), "--quiet", "--retryWrites", "--eval", INITIATE_SCRIPT]


def initiate_replica_set(shell: Path, port: int, logger: logging.Logger, *, timeout: float = 30.0) -> None:
    """Run ``rs.initiate()`` against the server on ``port``.

    Shell output goes to ``logger`` at debug level.

    Raises:
        ReplicaInitError: If the shell could not run, timed out, or exited non-zero.
    """
    cmd = build_initiate_command(shell, port)
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise ReplicaInitError(
            "replica set initiation timed out",
            context={"shell": str(shell), "port": port, "timeout": timeout},
        ) from exc
    except OSError as exc:
        raise ReplicaInitError(
            f"could not run mongo shell: {exc}",
            context={"shell": str(shell), "port": port},
        ) from exc

    for line in (result.stdout or "").splitlines():
        logger.debug("[rs.initiate stdout] %s", line)
    for line in (result.stderr or "").splitlines():
        logger.debug("[rs.initiate stderr] %s", line)

    if result.returncode != 0:
        raise ReplicaInitError(
            f"replica set initiation failed with exit code {result.returncode}",
            context={
                "shell": str(shell),
                "port": port,
                "exit_code": result.returncode,
                "stderr": (result.stderr or "").strip()[-2000:],
            },
        )


__all__ = ["INITIATE_SCRIPT", "build_initiate_command", "initiate_replica_set"]
