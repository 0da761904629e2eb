from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_INSTALLED_HANDLER: logging.Handler | None = None
_INSTALLED_KEY: str | None = None


def level_from_name(name: str | int) -> int:
    if isinstance(name, int):
        return name
    value = logging.getLevelName(str(name).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(*, level: str | int = "INFO", log_path: Path | None = None) -> None:
    """Install a single stderr (or file) handler on the ``scratchmongo`` logger.

    Idempotent per-process: if already configured for the same target, only the
    level is updated.
    """
    global _INSTALLED_HANDLER, _INSTALLED_KEY

    logger = logging.getLogger("scratchmongo")
    resolved_level = level_from_name(level)
    key = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"

    if _INSTALLED_HANDLER is not None and _INSTALLED_KEY == key:
        logger.setLevel(resolved_level)
        _INSTALLED_HANDLER.setLevel(resolved_level)
        return

    if _INSTALLED_HANDLER is not None:
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
        _INSTALLED_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        Path(key).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(key, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(resolved_level)

    _INSTALLED_HANDLER = handler
    _INSTALLED_KEY = key


def reset_logging_for_tests() -> None:
    """Test-only: remove the installed handler."""
    global _INSTALLED_HANDLER, _INSTALLED_KEY
    if _INSTALLED_HANDLER is not None:
        logger = logging.getLogger("scratchmongo")
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
        logger.setLevel(logging.NOTSET)
    _INSTALLED_HANDLER = None
    _INSTALLED_KEY = None


__all__ = ["LOG_FORMAT", "configure_logging", "level_from_name", "reset_logging_for_tests"]
