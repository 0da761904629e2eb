"""Process utilities for scratchmongo.

- Liveness checks that treat zombies and recycled PIDs as dead
- Forcible termination of child and foreign processes
"""
from __future__ import annotations

from .control import kill_pid, kill_process
from .inspector import current_pid, is_process_alive, process_create_time

__all__ = [
    "current_pid",
    "is_process_alive",
    "kill_pid",
    "kill_process",
    "process_create_time",
]
