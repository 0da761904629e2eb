"""
scratchmongo configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import jsonschema

from scratchmongo.core.exceptions import ConfigurationError
from scratchmongo.core.utils.io import read_yaml
from scratchmongo.core.utils.merge import deep_merge
from scratchmongo.data import get_data_path, read_json, read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "SCRATCHMONGO_"
CONFIG_PATH_ENV = "SCRATCHMONGO_CONFIG"
MONGOD_BIN_ENV = "SCRATCHMONGO_MONGOD_BIN"

# Environment variables with the prefix that are not config overrides.
RESERVED_ENV_KEYS = frozenset({CONFIG_PATH_ENV, MONGOD_BIN_ENV})


def default_user_config_path() -> Path:
    """Return the user config file location (``$SCRATCHMONGO_CONFIG`` wins)."""
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / "scratchmongo" / "config.yaml"


class ConfigManager:
    """Load, merge, and validate scratchmongo configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: SCRATCHMONGO_<section>__<key>
    2. User config file: $SCRATCHMONGO_CONFIG or ~/.config/scratchmongo/config.yaml
    3. Bundled defaults: scratchmongo.data/config/defaults.yaml
    """

    def __init__(self, user_config_path: Optional[Path] = None) -> None:
        self.user_config_path = Path(user_config_path) if user_config_path else default_user_config_path()
        self.defaults_path = get_data_path("config", "defaults.yaml")

    # ---------- value coercion ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            try:
                return int(v)
            except ValueError:
                return None
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            try:
                return float(s)
            except ValueError:
                return None
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    # ---------- environment overrides ----------

    def _parse_env_key(self, raw: str) -> List[str]:
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            raise ConfigurationError(
                f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                context={"key": raw},
            )
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key in RESERVED_ENV_KEYS:
                continue
            raw = key[len(ENV_PREFIX):]
            if not raw:
                continue
            yield self._parse_env_key(raw), self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur = root
        for part in path[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[path[-1]] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ---------- loading ----------

    def load_user_config(self) -> Dict[str, Any]:
        if not self.user_config_path.exists():
            return {}
        try:
            # Fail closed: configuration must never silently ignore invalid YAML.
            data = read_yaml(self.user_config_path, default={}, raise_on_error=True)
        except Exception as exc:
            raise ConfigurationError(
                f"Could not read config file {self.user_config_path}: {exc}",
                context={"path": str(self.user_config_path)},
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {self.user_config_path} must contain a mapping",
                context={"path": str(self.user_config_path)},
            )
        return data

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = read_json("schemas", "config.schema.json")
        validator = jsonschema.Draft7Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: [str(p) for p in e.path])
        if not errors:
            return
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors[:5]
        )
        raise ConfigurationError(
            f"Invalid scratchmongo configuration: {details}",
            context={"errors": [err.message for err in errors]},
        )

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load and merge configuration from all sources (uncached)."""
        cfg: Dict[str, Any] = copy.deepcopy(read_bundled_yaml("config", "defaults.yaml"))
        user_cfg = self.load_user_config()
        if user_cfg:
            logger.debug("Loaded user config from %s", self.user_config_path)
            cfg = deep_merge(cfg, user_cfg)
        self.apply_env_overrides(cfg)
        if validate:
            self.validate_schema(cfg)
        return cfg


__all__ = [
    "ConfigManager",
    "CONFIG_PATH_ENV",
    "ENV_PREFIX",
    "MONGOD_BIN_ENV",
    "default_user_config_path",
]
