"""Filesystem helpers for throwaway data directories."""
from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

STORAGE_DIR_PREFIX = "scratchmongo-"


def create_storage_directory(parent: Path | None = None) -> Path:
    """Create an exclusively-owned temporary directory for ``--dbpath``."""
    return Path(tempfile.mkdtemp(prefix=STORAGE_DIR_PREFIX, dir=str(parent) if parent else None))


def remove_tree(path: Path) -> None:
    """Remove ``path`` recursively. An already-absent directory is not an error."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return


__all__ = ["STORAGE_DIR_PREFIX", "create_storage_directory", "remove_tree"]
