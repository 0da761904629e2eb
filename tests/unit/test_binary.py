"""Tests for mongod / mongo shell resolution."""

import pytest

from scratchmongo.core.binary import MONGOD_NAME, resolve_binary, resolve_shell_binary
from scratchmongo.core.exceptions import BinaryNotFoundError

from helpers.fake_mongod import write_fake_mongod, write_fake_shell


@pytest.fixture
def empty_path(tmp_path, monkeypatch):
    empty = tmp_path / "empty-path"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty


def _config(cache_dir):
    return {"binary": {"cache_dir": str(cache_dir)}}


class TestResolveBinary:
    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        explicit = write_fake_mongod(tmp_path / "explicit")
        other = write_fake_mongod(tmp_path / "env")
        monkeypatch.setenv("SCRATCHMONGO_MONGOD_BIN", str(other.path))
        assert resolve_binary("6.0", explicit_path=explicit.path) == explicit.path

    def test_explicit_path_must_be_executable(self, tmp_path):
        plain = tmp_path / "mongod"
        plain.write_text("not executable", encoding="utf-8")
        with pytest.raises(BinaryNotFoundError):
            resolve_binary("6.0", explicit_path=plain)

    def test_environment_variable(self, tmp_path, monkeypatch):
        fake = write_fake_mongod(tmp_path / "env")
        monkeypatch.setenv("SCRATCHMONGO_MONGOD_BIN", str(fake.path))
        assert resolve_binary("6.0", config=_config(tmp_path / "cache")) == fake.path

    def test_broken_environment_variable_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SCRATCHMONGO_MONGOD_BIN", str(tmp_path / "missing"))
        with pytest.raises(BinaryNotFoundError):
            resolve_binary("6.0")

    def test_versioned_cache_dir(self, tmp_path, empty_path):
        cache = tmp_path / "cache"
        fake = write_fake_mongod(cache / "6.0" / "bin", name=MONGOD_NAME)
        assert resolve_binary("6.0", config=_config(cache)) == fake.path

    def test_unpacked_release_archive(self, tmp_path, empty_path):
        cache = tmp_path / "cache"
        fake = write_fake_mongod(cache / "mongodb-linux-x86_64-ubuntu2204-6.0.14" / "bin", name=MONGOD_NAME)
        assert resolve_binary("6.0", config=_config(cache)) == fake.path

    def test_path_lookup(self, tmp_path, empty_path):
        fake = write_fake_mongod(empty_path, name=MONGOD_NAME)
        assert resolve_binary("6.0", config=_config(tmp_path / "cache")) == fake.path

    def test_nothing_found_lists_searched_locations(self, tmp_path, empty_path):
        with pytest.raises(BinaryNotFoundError) as excinfo:
            resolve_binary("6.0", config=_config(tmp_path / "cache"))
        searched = excinfo.value.context["searched"]
        assert str(tmp_path / "cache" / "6.0" / "bin" / MONGOD_NAME) in searched
        assert searched[-1] == f"PATH:{MONGOD_NAME}"


class TestResolveShell:
    def test_explicit_shell(self, tmp_path):
        shell = write_fake_shell(tmp_path)
        assert resolve_shell_binary(explicit_path=shell.path) == shell.path

    def test_candidates_in_order(self, empty_path):
        legacy = write_fake_shell(empty_path, name="mongo")
        assert resolve_shell_binary(config={}) == legacy.path
        modern = write_fake_shell(empty_path, name="mongosh")
        assert resolve_shell_binary(config={}) == modern.path

    def test_no_shell_raises(self, empty_path):
        with pytest.raises(BinaryNotFoundError) as excinfo:
            resolve_shell_binary(config={})
        assert excinfo.value.context["candidates"] == ["mongosh", "mongo"]
