"""
scratchmongo which command.

SUMMARY: Show which mongod binary would be used
"""

from __future__ import annotations

import argparse
import sys

from scratchmongo.cli import OutputFormatter, add_json_flag, add_mongo_version_arg
from scratchmongo.core.binary import resolve_binary
from scratchmongo.core.config.domains import ServerConfig
from scratchmongo.core.exceptions import ScratchMongoError

SUMMARY = "Show which mongod binary would be used"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_mongo_version_arg(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        version = args.mongo_version or ServerConfig().version
        path = resolve_binary(version)
    except ScratchMongoError as e:
        formatter.error(e, error_code="which_error")
        return 1
    formatter.success({"version": version, "path": str(path)}, str(path))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
