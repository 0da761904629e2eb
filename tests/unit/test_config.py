"""
Tests for layered configuration loading.

Every test runs with SCRATCHMONGO_CONFIG pointing into its own tmp dir
(see conftest), so only what the test writes is loaded.
"""

import pytest
import yaml

from scratchmongo.core.config import ConfigManager, clear_config_cache, get_cached_config
from scratchmongo.core.config.domains import (
    BinaryConfig,
    ContainerConfig,
    LoggingConfig,
    ServerConfig,
    WatchdogConfig,
)
from scratchmongo.core.exceptions import ConfigurationError


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


class TestDefaults:
    def test_bundled_defaults_validate(self):
        cfg = ConfigManager().load_config()
        assert cfg["server"]["version"] == "6.0"
        assert cfg["binary"]["shell_candidates"] == ["mongosh", "mongo"]

    def test_domain_accessors_read_defaults(self):
        assert ServerConfig().startup_timeout_seconds == 60.0
        assert ServerConfig().storage_engine is None
        assert WatchdogConfig().poll_interval_seconds == 1.0
        assert ContainerConfig().image_for("6.0") == "mongo:6.0"
        assert LoggingConfig().level == "INFO"
        assert LoggingConfig().path is None
        assert BinaryConfig().replica_init_timeout_seconds == 30.0

    def test_loading_does_not_mutate_bundled_defaults(self, monkeypatch):
        monkeypatch.setenv("SCRATCHMONGO_SERVER__HOST", "db.internal")
        assert ConfigManager().load_config()["server"]["host"] == "db.internal"
        monkeypatch.delenv("SCRATCHMONGO_SERVER__HOST")
        assert ConfigManager().load_config()["server"]["host"] == "localhost"


class TestUserConfig:
    def test_user_file_overrides_defaults(self, user_config):
        _write(user_config, {"server": {"version": "7.0", "extra_args": ["--nounixsocket"]}})
        cfg = ConfigManager().load_config()
        assert cfg["server"]["version"] == "7.0"
        assert cfg["server"]["extra_args"] == ["--nounixsocket"]
        assert cfg["server"]["host"] == "localhost"

    def test_invalid_yaml_raises(self, user_config):
        user_config.write_text("server: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager().load_config()

    def test_non_mapping_raises(self, user_config):
        user_config.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ConfigManager().load_config()

    def test_schema_violation_raises(self, user_config):
        _write(user_config, {"server": {"storage_engine": "inMemory"}})
        with pytest.raises(ConfigurationError) as excinfo:
            ConfigManager().load_config()
        assert "storage_engine" in str(excinfo.value)


class TestEnvironmentOverrides:
    def test_values_are_type_coerced(self, monkeypatch):
        monkeypatch.setenv("SCRATCHMONGO_SERVER__STARTUP_TIMEOUT_SECONDS", "15")
        monkeypatch.setenv("SCRATCHMONGO_WATCHDOG__POLL_INTERVAL_SECONDS", "0.5")
        monkeypatch.setenv("SCRATCHMONGO_SERVER__EXTRA_ARGS", '["--quiet"]')
        cfg = ConfigManager().load_config()
        assert cfg["server"]["startup_timeout_seconds"] == 15
        assert cfg["watchdog"]["poll_interval_seconds"] == 0.5
        assert cfg["server"]["extra_args"] == ["--quiet"]

    def test_env_beats_user_file(self, monkeypatch, user_config):
        _write(user_config, {"server": {"host": "from-file"}})
        monkeypatch.setenv("SCRATCHMONGO_SERVER__HOST", "from-env")
        assert ConfigManager().load_config()["server"]["host"] == "from-env"

    def test_numeric_version_is_accepted(self, monkeypatch):
        monkeypatch.setenv("SCRATCHMONGO_SERVER__VERSION", "7.0")
        assert ServerConfig().version == "7.0"

    def test_reserved_keys_are_not_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SCRATCHMONGO_MONGOD_BIN", str(tmp_path / "mongod"))
        cfg = ConfigManager().load_config()
        assert "mongod_bin" not in cfg

    def test_empty_segment_raises(self, monkeypatch):
        monkeypatch.setenv("SCRATCHMONGO_SERVER____HOST", "x")
        with pytest.raises(ConfigurationError):
            ConfigManager().load_config()


class TestCache:
    def test_cache_follows_environment(self, monkeypatch):
        assert get_cached_config()["server"]["host"] == "localhost"
        monkeypatch.setenv("SCRATCHMONGO_SERVER__HOST", "other")
        assert get_cached_config()["server"]["host"] == "other"

    def test_cache_follows_file_changes(self, user_config):
        _write(user_config, {"server": {"version": "5.0"}})
        assert get_cached_config()["server"]["version"] == "5.0"
        _write(user_config, {"server": {"version": "7.0", "host": "changed-size"}})
        assert get_cached_config()["server"]["version"] == "7.0"

    def test_clear_config_cache(self):
        first = get_cached_config()
        clear_config_cache()
        assert get_cached_config() is not first
