"""
scratchmongo start command.

SUMMARY: Start a throwaway mongod and keep it running until interrupted

Prints the connection URI once the server is ready, then blocks until
SIGINT or SIGTERM and tears everything down.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from typing import Any, Optional

from scratchmongo.cli import OutputFormatter, add_json_flag, add_mongo_version_arg
from scratchmongo.core.exceptions import ScratchMongoError
from scratchmongo.core.options import ServerOptions
from scratchmongo.core.server.manager import start_with_options

SUMMARY = "Start a throwaway mongod and keep it running until interrupted"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_mongo_version_arg(parser)
    parser.add_argument("--port", type=int, default=0, help="Port to listen on (default: a free port)")
    parser.add_argument(
        "--engine",
        choices=["ephemeral", "durable"],
        default=None,
        help="Storage engine (default: ephemeral, durable with --replica)",
    )
    parser.add_argument("--replica", action="store_true", help="Start a single-node replica set")
    parser.add_argument("--container", action="store_true", help="Run mongod through docker")
    parser.add_argument("--timeout", type=float, default=None, help="Startup timeout in seconds")
    parser.add_argument("--binary", default=None, help="Explicit mongod executable")
    add_json_flag(parser)


def options_from_args(args: argparse.Namespace) -> ServerOptions:
    return ServerOptions(
        version=args.mongo_version,
        port=args.port,
        storage_engine=args.engine,
        use_replica=args.replica,
        use_container=args.container,
        startup_timeout=args.timeout,
        binary_path=args.binary,
    )


def _install_stop_handlers(stop: threading.Event) -> None:
    def _handler(signum: int, frame: Optional[Any]) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(args: argparse.Namespace) -> int:
    """Start a server, print its URI, and wait for a stop signal."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        handle = start_with_options(options_from_args(args))
    except ScratchMongoError as e:
        formatter.error(e, error_code="start_error")
        return 1

    stop = threading.Event()
    try:
        _install_stop_handlers(stop)
        formatter.success(
            {
                "uri": handle.uri(),
                "port": handle.port,
                "pid": getattr(handle, "pid", None),
                "container_id": getattr(handle, "container_id", None),
            },
            handle.uri(),
            status="ready",
        )
        while not stop.wait(0.5):
            pass
    finally:
        handle.stop()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
