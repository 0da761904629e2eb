"""scratchmongo: throwaway MongoDB servers for test suites.

Typical use::

    from scratchmongo import start

    with start("6.0") as server:
        client = MongoClient(server.uri())
"""
from __future__ import annotations

from scratchmongo.core.exceptions import (
    BinaryNotFoundError,
    ConfigurationError,
    ContainerError,
    LaunchError,
    ReplicaInitError,
    ScratchMongoError,
    StartupError,
    StartupTimeoutError,
    WatchdogError,
)
from scratchmongo.core.options import ServerOptions, StorageEngine
from scratchmongo.core.server.container import ContainerHandle, start_container, start_container_with_options
from scratchmongo.core.server.handle import ServerHandle
from scratchmongo.core.server.manager import start, start_with_options
from scratchmongo.core.utils.names import random_database_name

__version__ = "1.0.0"

__all__ = [
    "BinaryNotFoundError",
    "ConfigurationError",
    "ContainerError",
    "ContainerHandle",
    "LaunchError",
    "ReplicaInitError",
    "ScratchMongoError",
    "ServerHandle",
    "ServerOptions",
    "StartupError",
    "StartupTimeoutError",
    "StorageEngine",
    "WatchdogError",
    "__version__",
    "random_database_name",
    "start",
    "start_container",
    "start_container_with_options",
    "start_with_options",
]
