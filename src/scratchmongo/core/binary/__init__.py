"""Binary resolution for mongod and the mongo shell."""
from __future__ import annotations

from .resolver import MONGOD_NAME, resolve_binary, resolve_shell_binary

__all__ = ["MONGOD_NAME", "resolve_binary", "resolve_shell_binary"]
