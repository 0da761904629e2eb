from __future__ import annotations

import secrets
import string

DEFAULT_DATABASE_NAME_LENGTH = 12


def random_database_name(length: int = DEFAULT_DATABASE_NAME_LENGTH) -> str:
    """Return a random lowercase database name, e.g. ``qhzkwmfbtrea``."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(string.ascii_lowercase) for _ in range(length))


__all__ = ["DEFAULT_DATABASE_NAME_LENGTH", "random_database_name"]
