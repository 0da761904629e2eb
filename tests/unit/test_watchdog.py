"""
Tests for the out-of-process watchdog.

IMPORTANT: These tests spawn the REAL watchdog module as a separate process.
"""

import os
import subprocess
import sys

import pytest

from scratchmongo.core.exceptions import WatchdogError
from scratchmongo.core.server import watchdog as watchdog_mod
from scratchmongo.core.server.watchdog import (
    READY_TOKEN,
    WATCHDOG_MODULE,
    build_watchdog_command,
    main,
    spawn_watchdog,
    watch,
    watchdog_environment,
)
from scratchmongo.core.utils.process import current_pid, is_process_alive, process_create_time

from helpers.timeouts import PROCESS_WAIT_TIMEOUT, wait_for_condition


def _sleeper(seconds=60):
    return subprocess.Popen([sys.executable, "-c", f"import time; time.sleep({seconds})"])


@pytest.fixture
def processes():
    spawned = []

    def _spawn(seconds=60):
        proc = _sleeper(seconds)
        spawned.append(proc)
        return proc

    yield _spawn
    for proc in spawned:
        if proc.poll() is None:
            proc.kill()
        proc.wait(PROCESS_WAIT_TIMEOUT)


class TestCommand:
    def test_runs_module_with_both_pids(self):
        cmd = build_watchdog_command(10, 20, poll_interval=0.5)
        assert cmd[:3] == [sys.executable, "-m", WATCHDOG_MODULE]
        assert cmd[cmd.index("--parent-pid") + 1] == "10"
        assert cmd[cmd.index("--child-pid") + 1] == "20"
        assert cmd[cmd.index("--interval") + 1] == "0.5"
        assert "--parent-create-time" not in cmd

    def test_passes_parent_create_time(self):
        cmd = build_watchdog_command(10, 20, poll_interval=0.5, parent_create_time=1700000000.25)
        assert float(cmd[cmd.index("--parent-create-time") + 1]) == 1700000000.25

    def test_environment_can_import_the_package(self):
        env = watchdog_environment({"PYTHONPATH": "/opt/extra"})
        entries = env["PYTHONPATH"].split(os.pathsep)
        assert any(os.path.isdir(os.path.join(entry, "scratchmongo")) for entry in entries)
        assert "/opt/extra" in entries


class TestWatchLoop:
    def test_returns_when_child_is_gone(self):
        assert watch(current_pid(), 999999, interval=0.01) == 0

    def test_kills_child_when_parent_is_gone(self, processes):
        child = processes()
        assert watch(999999, child.pid, interval=0.01) == 1
        child.wait(PROCESS_WAIT_TIMEOUT)
        assert child.returncode is not None

    def test_polls_until_something_changes(self, processes):
        child = processes()
        calls = []

        def fake_sleep(seconds):
            calls.append(seconds)
            if len(calls) == 3:
                child.kill()
                child.wait(PROCESS_WAIT_TIMEOUT)

        assert watch(current_pid(), child.pid, interval=0.2, sleep=fake_sleep) == 0
        assert calls == [0.2, 0.2, 0.2]

    def test_recycled_parent_pid_counts_as_dead(self, processes):
        child = processes()
        stale = process_create_time(current_pid()) - 100.0
        assert watch(current_pid(), child.pid, interval=0.01, parent_create_time=stale) == 1
        child.wait(PROCESS_WAIT_TIMEOUT)
        assert child.returncode is not None

    def test_reports_ready_before_polling(self):
        events = []
        watch(
            current_pid(),
            999999,
            interval=0.01,
            sleep=lambda s: events.append("sleep"),
            on_ready=lambda: events.append("ready"),
        )
        assert events == ["ready"]

    def test_main_prints_ready_token(self, capsys):
        assert main(["--parent-pid", str(current_pid()), "--child-pid", "999999"]) == 0
        assert capsys.readouterr().out == READY_TOKEN + "\n"


@pytest.mark.slow
class TestSpawnedWatchdog:
    def test_kills_child_after_parent_dies(self, processes):
        parent = processes()
        child = processes()
        guard = spawn_watchdog(parent.pid, child.pid, poll_interval=0.05)
        try:
            assert is_process_alive(child.pid)
            parent.kill()
            parent.wait(PROCESS_WAIT_TIMEOUT)
            child.wait(PROCESS_WAIT_TIMEOUT)
            assert guard.wait(PROCESS_WAIT_TIMEOUT) == 1
        finally:
            if guard.poll() is None:
                guard.kill()
                guard.wait(PROCESS_WAIT_TIMEOUT)

    def test_exits_when_child_exits_first(self, processes):
        child = processes()
        guard = spawn_watchdog(current_pid(), child.pid, poll_interval=0.05)
        try:
            child.kill()
            child.wait(PROCESS_WAIT_TIMEOUT)
            assert guard.wait(PROCESS_WAIT_TIMEOUT) == 0
        finally:
            if guard.poll() is None:
                guard.kill()
                guard.wait(PROCESS_WAIT_TIMEOUT)

    def test_survives_while_both_are_alive(self, processes):
        child = processes()
        guard = spawn_watchdog(current_pid(), child.pid, poll_interval=0.05)
        try:
            assert not wait_for_condition(lambda: guard.poll() is not None, timeout=0.5)
        finally:
            guard.kill()
            guard.wait(PROCESS_WAIT_TIMEOUT)


class TestSpawnFailure:
    def test_unlaunchable_interpreter_raises(self, monkeypatch, tmp_path):
        monkeypatch.setattr(watchdog_mod.sys, "executable", str(tmp_path / "no-such-python"))
        with pytest.raises(WatchdogError):
            spawn_watchdog(current_pid(), current_pid())

    def test_watchdog_that_exits_at_once_raises(self, monkeypatch, processes):
        child = processes()
        monkeypatch.setattr(
            watchdog_mod,
            "build_watchdog_command",
            lambda *args, **kwargs: [sys.executable, "-c", "import sys; sys.exit(1)"],
        )
        with pytest.raises(WatchdogError) as excinfo:
            spawn_watchdog(current_pid(), child.pid)
        assert "failed to report readiness" in str(excinfo.value)
        assert is_process_alive(child.pid)

    def test_silent_watchdog_times_out(self, monkeypatch, processes):
        child = processes()
        monkeypatch.setattr(
            watchdog_mod,
            "build_watchdog_command",
            lambda *args, **kwargs: [sys.executable, "-c", "import time; time.sleep(60)"],
        )
        with pytest.raises(WatchdogError) as excinfo:
            spawn_watchdog(current_pid(), child.pid, ready_timeout=0.5)
        assert excinfo.value.context["timeout"] == 0.5

    def test_wrong_handshake_line_raises(self, monkeypatch, processes):
        child = processes()
        monkeypatch.setattr(
            watchdog_mod,
            "build_watchdog_command",
            lambda *args, **kwargs: [sys.executable, "-c", "print('hello'); import time; time.sleep(60)"],
        )
        with pytest.raises(WatchdogError):
            spawn_watchdog(current_pid(), child.pid)


@pytest.mark.slow
class TestSpawnWithoutInstall:
    def test_spawns_without_pythonpath(self, monkeypatch, processes):
        monkeypatch.delenv("PYTHONPATH", raising=False)
        child = processes()
        guard = spawn_watchdog(current_pid(), child.pid, poll_interval=0.05)
        try:
            assert guard.poll() is None
        finally:
            guard.kill()
            guard.wait(PROCESS_WAIT_TIMEOUT)
