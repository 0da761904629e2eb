import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'scratchmongo' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from scratchmongo.core.config import clear_config_cache
from scratchmongo.core.utils.stdlib_logging import reset_logging_for_tests
from scratchmongo.data import clear_caches as clear_data_caches

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch):
    """Never read the developer's own config file or SCRATCHMONGO_* overrides."""
    cfg_dir = tmp_path_factory.mktemp("scratchmongo-config")
    for key in list(os.environ):
        if key.startswith("SCRATCHMONGO_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("SCRATCHMONGO_CONFIG", str(cfg_dir / "config.yaml"))
    clear_config_cache()
    clear_data_caches()
    yield cfg_dir / "config.yaml"
    clear_config_cache()
    reset_logging_for_tests()


@pytest.fixture
def user_config(_isolated_config):
    """Path of the (initially absent) user config file for this test."""
    return _isolated_config
