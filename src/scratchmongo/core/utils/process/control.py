"""Forcible termination of child and foreign processes."""
from __future__ import annotations

import subprocess
from typing import Any

import psutil


def kill_process(proc: subprocess.Popen[Any], *, timeout_seconds: float = 5.0) -> bool:
    """SIGKILL a child process and reap it.

    Returns:
        True if the process was killed, False if it had already exited.

    Raises:
        OSError: If the signal could not be delivered.
        subprocess.TimeoutExpired: If the process did not go away in time.
    """
    if proc.poll() is not None:
        return False
    proc.kill()
    proc.wait(timeout=max(0.1, float(timeout_seconds)))
    return True


def kill_pid(pid: int, *, timeout_seconds: float = 5.0) -> bool:
    """SIGKILL a process that is not necessarily our child.

    Returns:
        True if the process was killed, False if it no longer existed.
    """
    if pid <= 0:
        return False
    try:
        proc = psutil.Process(pid)
        proc.kill()
    except psutil.NoSuchProcess:
        return False
    try:
        proc.wait(timeout=max(0.1, float(timeout_seconds)))
    except psutil.NoSuchProcess:
        pass
    except psutil.TimeoutExpired:
        # Killed but not reaped: the parent owns the zombie.
        try:
            zombie = proc.status() == psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            zombie = True
        if not zombie:
            raise
    return True


__all__ = ["kill_process", "kill_pid"]
