"""mongod lifecycle: launch, startup detection, supervision and teardown."""
from __future__ import annotations
