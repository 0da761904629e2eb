"""I/O utilities for scratchmongo.

- YAML: tolerant reads for configuration files
- Filesystem: creation and removal of throwaway data directories
"""
from __future__ import annotations

from .fs import STORAGE_DIR_PREFIX, create_storage_directory, remove_tree
from .yaml import dump_yaml_string, read_yaml

__all__ = [
    "STORAGE_DIR_PREFIX",
    "create_storage_directory",
    "remove_tree",
    "dump_yaml_string",
    "read_yaml",
]
