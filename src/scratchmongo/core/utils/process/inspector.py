"""Process liveness checks.

psutil is a required dependency: the watchdog has to observe processes that
are not its own children, and ``os.kill(pid, 0)`` cannot tell a zombie from a
live process.
"""
from __future__ import annotations

import os

import psutil


def is_process_alive(pid: int, *, create_time: float | None = None) -> bool:
    """Check if a process is alive by PID.

    Zombies count as dead. When ``create_time`` is given, a process whose
    start time differs is a recycled PID and also counts as dead.

    Args:
        pid: Process ID to check
        create_time: Expected ``psutil.Process.create_time()`` value

    Returns:
        bool: True if the process is alive
    """
    if pid <= 0:
        return False
    try:
        proc = psutil.Process(pid)
        if proc.status() == psutil.STATUS_ZOMBIE:
            return False
        if create_time is not None and abs(proc.create_time() - create_time) > 0.01:
            return False
        return True
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        # Permission denied implies the process exists but is protected
        return True


def process_create_time(pid: int) -> float | None:
    """Return the start time of ``pid`` or None when it does not exist."""
    try:
        return psutil.Process(pid).create_time()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return None


def current_pid() -> int:
    return os.getpid()


__all__ = ["is_process_alive", "process_create_time", "current_pid"]
