"""pytest plugin providing a session-wide throwaway mongod.

Registered through the ``pytest11`` entry point, so installing scratchmongo is
enough::

    def test_insert(mongo_uri):
        client = MongoClient(mongo_uri)
        ...

Tests depending on ``mongo_server`` are skipped when no mongod binary can be
resolved.
"""
from __future__ import annotations

from typing import Iterator, Union

import pytest

from scratchmongo.core.exceptions import BinaryNotFoundError
from scratchmongo.core.options import ServerOptions
from scratchmongo.core.server.container import ContainerHandle
from scratchmongo.core.server.handle import ServerHandle
from scratchmongo.core.server.manager import start_with_options


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("scratchmongo", "throwaway mongod servers")
    group.addoption(
        "--mongo-version",
        action="store",
        default=None,
        help="MongoDB version for the mongo_server fixture (default: server.version from config)",
    )
    group.addoption(
        "--mongo-replica",
        action="store_true",
        default=False,
        help="Start the mongo_server fixture as a single-node replica set",
    )


@pytest.fixture(scope="session")
def mongo_server(request: pytest.FixtureRequest) -> Iterator[Union[ServerHandle, ContainerHandle]]:
    """A mongod shared by the whole test session."""
    options = ServerOptions(
        version=request.config.getoption("--mongo-version"),
        use_replica=bool(request.config.getoption("--mongo-replica")),
    )
    try:
        handle = start_with_options(options)
    except BinaryNotFoundError as exc:
        pytest.skip(f"mongod not available: {exc}")
    try:
        yield handle
    finally:
        handle.stop()


@pytest.fixture
def mongo_uri(mongo_server: Union[ServerHandle, ContainerHandle]) -> str:
    """Connection URI with a database name unique to the calling test."""
    return mongo_server.uri_with_random_db()
