"""Locate mongod and mongo shell executables.

Downloading distributions is out of scope: binaries must already exist on
disk, either at an explicit path, via ``$SCRATCHMONGO_MONGOD_BIN``, unpacked
under the configured cache directory, or on ``PATH``.
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from scratchmongo.core.config import MONGOD_BIN_ENV
from scratchmongo.core.config.domains import BinaryConfig
from scratchmongo.core.exceptions import BinaryNotFoundError

logger = logging.getLogger(__name__)

MONGOD_NAME = "mongod.exe" if os.name == "nt" else "mongod"


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def _cache_candidates(cache_dir: Path, version: str) -> List[Path]:
    """Candidate mongod paths under ``cache_dir`` for ``version``.

    Accepts both ``<cache>/<version>/bin/mongod`` and unpacked release
    archives such as ``<cache>/mongodb-linux-x86_64-ubuntu2204-6.0.14/bin/mongod``.
    """
    candidates = [cache_dir / version / "bin" / MONGOD_NAME]
    if cache_dir.is_dir():
        for entry in sorted(cache_dir.glob(f"mongodb-*-{version}*"), reverse=True):
            candidates.append(entry / "bin" / MONGOD_NAME)
    return candidates


def resolve_binary(
    version: str,
    *,
    explicit_path: Optional[Path] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Return a local mongod executable for ``version``.

    Raises:
        BinaryNotFoundError: If no candidate exists or an explicit path is not executable.
    """
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if not _is_executable(path):
            raise BinaryNotFoundError(
                f"mongod binary not found or not executable: {path}",
                context={"path": str(path), "version": version},
            )
        return path

    from_env = os.environ.get(MONGOD_BIN_ENV, "").strip()
    if from_env:
        path = Path(from_env).expanduser()
        if not _is_executable(path):
            raise BinaryNotFoundError(
                f"{MONGOD_BIN_ENV} points to a missing or non-executable file: {path}",
                context={"path": str(path), "version": version},
            )
        return path

    searched: List[str] = []
    cache_dir = BinaryConfig(config).cache_dir
    for candidate in _cache_candidates(cache_dir, version):
        searched.append(str(candidate))
        if _is_executable(candidate):
            logger.debug("Using cached mongod %s", candidate)
            return candidate

    on_path = shutil.which(MONGOD_NAME)
    if on_path:
        logger.debug("Using mongod from PATH: %s", on_path)
        return Path(on_path)
    searched.append(f"PATH:{MONGOD_NAME}")

    raise BinaryNotFoundError(
        f"No mongod binary found for version {version}",
        context={"version": version, "searched": searched},
    )


def resolve_shell_binary(
    *,
    explicit_path: Optional[Path] = None,
    candidates: Optional[Iterable[str]] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Return the shell used for administrative commands (mongosh, then mongo)."""
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if not _is_executable(path):
            raise BinaryNotFoundError(
                f"mongo shell not found or not executable: {path}",
                context={"path": str(path)},
            )
        return path

    names = list(candidates) if candidates is not None else BinaryConfig(config).shell_candidates
    for name in names:
        found = shutil.which(name)
        if found:
            return Path(found)
    raise BinaryNotFoundError(
        f"No mongo shell found on PATH (tried: {', '.join(names)})",
        context={"candidates": names},
    )


__all__ = ["MONGOD_NAME", "resolve_binary", "resolve_shell_binary"]
