"""Out-of-process watchdog that kills mongod when its owner dies.

The watchdog runs as ``python -m scratchmongo.core.server.watchdog`` in its own
session so it survives the owning process being killed outright. It polls the
owner; once the owner is gone it SIGKILLs mongod and exits. It also exits on
its own when mongod goes away first.

Startup is a handshake: the watchdog prints ``READY_TOKEN`` on stdout once it
holds both process start times, and ``spawn_watchdog`` fails unless that line
arrives in time.
"""
from __future__ import annotations

import argparse
import concurrent.futures
import logging
import os
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Optional

from scratchmongo.core.exceptions import WatchdogError
from scratchmongo.core.utils.process import is_process_alive, kill_pid, kill_process, process_create_time

logger = logging.getLogger(__name__)

WATCHDOG_MODULE = "scratchmongo.core.server.watchdog"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_READY_TIMEOUT = 10.0
READY_TOKEN = "scratchmongo-watchdog-ready"

# Directory holding the ``scratchmongo`` package.
_PACKAGE_ROOT = Path(__file__).resolve().parents[3]


def _popen_session_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", None)
        if isinstance(creationflags, int):
            return {"creationflags": creationflags}
    return {}


def watchdog_environment(base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Environment for the watchdog with this process's import path on PYTHONPATH.

    The package does not have to be installed for ``-m`` to find it.
    """
    env = dict(os.environ if base is None else base)
    entries: List[str] = []
    existing = env.get("PYTHONPATH", "")
    for entry in [str(_PACKAGE_ROOT), *sys.path, *existing.split(os.pathsep)]:
        if entry and entry not in entries:
            entries.append(entry)
    env["PYTHONPATH"] = os.pathsep.join(entries)
    return env


def build_watchdog_command(
    parent_pid: int,
    child_pid: int,
    *,
    poll_interval: float,
    parent_create_time: Optional[float] = None,
) -> List[str]:
    cmd = [
        sys.executable,
        "-m",
        WATCHDOG_MODULE,
        "--parent-pid",
        str(parent_pid),
        "--child-pid",
        str(child_pid),
        "--interval",
        str(poll_interval),
    ]
    if parent_create_time is not None:
        cmd += ["--parent-create-time", repr(parent_create_time)]
    return cmd


def _read_first_line(stream: IO[str]) -> concurrent.futures.Future[str]:
    result: concurrent.futures.Future[str] = concurrent.futures.Future()

    def _run() -> None:
        try:
            result.set_result(stream.readline())
        except (OSError, ValueError) as exc:
            result.set_exception(exc)

    threading.Thread(target=_run, name="scratchmongo-watchdog-handshake", daemon=True).start()
    return result


def _abandon(proc: subprocess.Popen[Any]) -> Optional[int]:
    try:
        kill_process(proc, timeout_seconds=DEFAULT_READY_TIMEOUT)
    except Exception as exc:
        logger.warning("Failed to stop watchdog pid=%s: %s", proc.pid, exc)
    if proc.stdout is not None:
        proc.stdout.close()
    return proc.poll()


def spawn_watchdog(
    parent_pid: int,
    child_pid: int,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    parent_create_time: Optional[float] = None,
    ready_timeout: float = DEFAULT_READY_TIMEOUT,
) -> subprocess.Popen[Any]:
    """Start a detached watchdog guarding ``child_pid`` on behalf of ``parent_pid``.

    Returns only after the watchdog reported that it is watching.

    Raises:
        WatchdogError: If the watchdog could not be spawned, exited, or did
            not report readiness within ``ready_timeout`` seconds.
    """
    cmd = build_watchdog_command(
        parent_pid,
        child_pid,
        poll_interval=poll_interval,
        parent_create_time=parent_create_time,
    )
    context: Dict[str, Any] = {"parent_pid": parent_pid, "child_pid": child_pid}
    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            close_fds=True,
            text=True,
            errors="replace",
            env=watchdog_environment(),
            **_popen_session_kwargs(),
        )
    except OSError as exc:
        raise WatchdogError(f"Failed to start watchdog: {exc}", context=context) from exc

    stdout = proc.stdout
    if stdout is None:
        _abandon(proc)
        raise WatchdogError("Watchdog stdout is not a pipe", context=context)

    try:
        line = _read_first_line(stdout).result(timeout=ready_timeout)
    except concurrent.futures.TimeoutError:
        _abandon(proc)
        raise WatchdogError(
            f"Watchdog did not report readiness within {ready_timeout}s",
            context={**context, "timeout": ready_timeout},
        ) from None
    except (OSError, ValueError) as exc:
        _abandon(proc)
        raise WatchdogError(f"Failed to read from watchdog: {exc}", context=context) from exc

    if line.strip() != READY_TOKEN:
        code = _abandon(proc)
        raise WatchdogError(
            f"Watchdog failed to report readiness (got {line.strip()!r}, exit code {code})",
            context={**context, "exit_code": code, "output": line.strip()},
        )

    stdout.close()
    logger.debug("Started watchdog pid=%s for mongod pid=%s", proc.pid, child_pid)
    return proc


def watch(
    parent_pid: int,
    child_pid: int,
    *,
    interval: float = DEFAULT_POLL_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
    parent_create_time: Optional[float] = None,
    on_ready: Optional[Callable[[], None]] = None,
) -> int:
    """Poll until either process is gone.

    ``on_ready`` runs once both start times are known.

    Returns:
        0 when mongod exited on its own, 1 when it was killed because the
        owner died.
    """
    parent_created = parent_create_time if parent_create_time is not None else process_create_time(parent_pid)
    child_created = process_create_time(child_pid)
    if on_ready is not None:
        on_ready()
    while True:
        if not is_process_alive(child_pid, create_time=child_created):
            return 0
        if not is_process_alive(parent_pid, create_time=parent_created):
            # A recycled child PID must not be killed.
            if is_process_alive(child_pid, create_time=child_created):
                kill_pid(child_pid)
            return 1
        sleep(interval)


def _report_ready() -> None:
    sys.stdout.write(READY_TOKEN + "\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scratchmongo-watchdog",
        description="Kill a mongod process once its owner exits.",
    )
    parser.add_argument("--parent-pid", type=int, required=True, help="PID of the owning process")
    parser.add_argument("--child-pid", type=int, required=True, help="PID of the mongod to guard")
    parser.add_argument(
        "--parent-create-time",
        type=float,
        default=None,
        help="Start time of the owning process, to detect a recycled PID",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help="Seconds between liveness checks",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.interval <= 0:
        args.interval = DEFAULT_POLL_INTERVAL
    return watch(
        args.parent_pid,
        args.child_pid,
        interval=args.interval,
        parent_create_time=args.parent_create_time,
        on_ready=_report_ready,
    )


__all__ = [
    "DEFAULT_READY_TIMEOUT",
    "READY_TOKEN",
    "WATCHDOG_MODULE",
    "build_parser",
    "build_watchdog_command",
    "main",
    "spawn_watchdog",
    "watch",
    "watchdog_environment",
]


if __name__ == "__main__":
    sys.exit(main())
