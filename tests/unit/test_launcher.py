"""Tests for mongod command construction and spawning."""

import logging
import subprocess
from pathlib import Path

import pytest

from scratchmongo.core.exceptions import ConfigurationError, LaunchError
from scratchmongo.core.options import ServerOptions, resolve_options
from scratchmongo.core.server import launcher as launcher_mod
from scratchmongo.core.server.classifier import StartupOutcome
from scratchmongo.core.server.launcher import build_command, launch
from scratchmongo.core.utils.io import create_storage_directory
from scratchmongo.core.utils.process import kill_process

from helpers.fake_mongod import argv_value, write_fake_mongod
from helpers.timeouts import PROCESS_WAIT_TIMEOUT


class TestBuildCommand:
    def test_standalone_uses_ephemeral_engine(self):
        resolved = resolve_options(ServerOptions(port=27018), config={})
        cmd = build_command(Path("/opt/mongod"), resolved, Path("/tmp/db"))
        assert cmd == [
            "/opt/mongod",
            "--storageEngine",
            "ephemeralForTest",
            "--dbpath",
            "/tmp/db",
            "--port",
            "27018",
        ]

    def test_replica_adds_repl_set_and_bind_ip(self):
        resolved = resolve_options(ServerOptions(port=27018, use_replica=True), config={})
        cmd = build_command(Path("/opt/mongod"), resolved, Path("/tmp/db"))
        assert argv_value(cmd, "--storageEngine") == "wiredTiger"
        assert argv_value(cmd, "--replSet") == "rs0"
        assert argv_value(cmd, "--bind_ip") == "localhost"

    def test_extra_args_come_last(self):
        resolved = resolve_options(
            ServerOptions(port=27018, extra_args=("--quiet",)),
            config={"server": {"extra_args": ["--nounixsocket"]}},
        )
        cmd = build_command(Path("/opt/mongod"), resolved, Path("/tmp/db"))
        assert cmd[-2:] == ["--nounixsocket", "--quiet"]


class TestLaunch:
    def test_spawns_and_classifies(self, tmp_path):
        fake = write_fake_mongod(tmp_path / "bin")
        resolved = resolve_options(ServerOptions(port=27018, logger=logging.getLogger("test.launch")), config={})
        storage = create_storage_directory(tmp_path)
        launched = launch(fake.path, resolved, storage)
        try:
            assert launched.classifier.wait(PROCESS_WAIT_TIMEOUT) == StartupOutcome.ready(27018)
            record = fake.wait_for_record()
            assert record["pid"] == launched.pid
            assert argv_value(record["argv"], "--dbpath") == str(storage)
        finally:
            kill_process(launched.process)

    def test_stderr_is_relayed(self, tmp_path, caplog):
        fake = write_fake_mongod(tmp_path / "bin", stderr=["warning: something odd"])
        logger = logging.getLogger("test.launch.stderr")
        resolved = resolve_options(ServerOptions(port=27018, logger=logger), config={})
        with caplog.at_level(logging.DEBUG, logger="test.launch.stderr"):
            launched = launch(fake.path, resolved, create_storage_directory(tmp_path))
            try:
                launched.classifier.wait(PROCESS_WAIT_TIMEOUT)
            finally:
                kill_process(launched.process)
            launched.relay.join(PROCESS_WAIT_TIMEOUT)
        assert "[mongod stderr] warning: something odd" in caplog.messages

    def test_missing_binary_raises_and_removes_storage(self, tmp_path):
        resolved = resolve_options(ServerOptions(port=27018), config={})
        storage = create_storage_directory(tmp_path)
        with pytest.raises(LaunchError):
            launch(tmp_path / "does-not-exist", resolved, storage)
        assert not storage.exists()

    def test_bad_failure_pattern_removes_storage(self, tmp_path):
        fake = write_fake_mongod(tmp_path / "bin")
        resolved = resolve_options(
            ServerOptions(port=27018),
            config={"server": {"extra_failure_patterns": [{"pattern": "(", "reason": "broken"}]}},
        )
        storage = create_storage_directory(tmp_path)
        with pytest.raises(ConfigurationError):
            launch(fake.path, resolved, storage)
        assert not storage.exists()


class TestRelease:
    def test_release_joins_readers_and_closes_pipes(self, tmp_path):
        fake = write_fake_mongod(tmp_path / "bin")
        resolved = resolve_options(ServerOptions(port=27018, logger=logging.getLogger("test.launch")), config={})
        launched = launch(fake.path, resolved, create_storage_directory(tmp_path))
        launched.classifier.wait(PROCESS_WAIT_TIMEOUT)
        kill_process(launched.process)

        launched.release(PROCESS_WAIT_TIMEOUT)

        assert not launched.classifier.running
        assert not launched.relay.running
        assert launched.process.stdout.closed
        assert launched.process.stderr.closed

    def test_release_twice_is_harmless(self, tmp_path):
        fake = write_fake_mongod(tmp_path / "bin", linger=0)
        resolved = resolve_options(ServerOptions(port=27018), config={})
        launched = launch(fake.path, resolved, create_storage_directory(tmp_path))
        launched.process.wait(PROCESS_WAIT_TIMEOUT)
        launched.release(PROCESS_WAIT_TIMEOUT)
        launched.release(PROCESS_WAIT_TIMEOUT)
        assert launched.process.stdout.closed


class _UnpipedPopen(subprocess.Popen):
    def __init__(self, cmd, **kwargs):
        kwargs["stdout"] = subprocess.DEVNULL
        kwargs["stderr"] = subprocess.DEVNULL
        super().__init__(cmd, **kwargs)


def test_unpiped_output_raises_and_cleans_up(tmp_path, monkeypatch):
    fake = write_fake_mongod(tmp_path / "bin")
    resolved = resolve_options(ServerOptions(port=27018), config={})
    storage = create_storage_directory(tmp_path)
    monkeypatch.setattr(launcher_mod.subprocess, "Popen", _UnpipedPopen)
    with pytest.raises(LaunchError, match="not piped"):
        launch(fake.path, resolved, storage)
    assert not storage.exists()
