"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode.

    Args:
        parser: ArgumentParser to add the flag to
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_mongo_version_arg(parser: argparse.ArgumentParser) -> None:
    """Add --mongo-version (defaults to the configured server.version)."""
    parser.add_argument(
        "--mongo-version",
        dest="mongo_version",
        default=None,
        help="MongoDB version, e.g. 6.0 (default: server.version from config)",
    )


__all__ = ["add_json_flag", "add_mongo_version_arg"]
