"""
scratchmongo config command.

SUMMARY: Show the effective configuration

Displays the merged configuration from bundled defaults, the user config file,
and SCRATCHMONGO_* environment overrides.
"""

from __future__ import annotations

import argparse
import sys

from scratchmongo.cli import OutputFormatter, add_json_flag
from scratchmongo.core.config import ConfigManager, default_user_config_path
from scratchmongo.core.exceptions import ScratchMongoError
from scratchmongo.core.utils.io import dump_yaml_string

SUMMARY = "Show the effective configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--section",
        default=None,
        help="Only show one top-level section (e.g. 'server')",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Show configuration - delegates to ConfigManager."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        config_data = ConfigManager().load_config(validate=True)
    except ScratchMongoError as e:
        formatter.error(e, error_code="config_error")
        return 1

    if args.section:
        if args.section not in config_data:
            formatter.error(KeyError(args.section), f"Unknown section: {args.section}", error_code="config_error")
            return 1
        config_data = {args.section: config_data[args.section]}

    if formatter.json_mode:
        formatter.json_output(config_data)
    else:
        formatter.text(f"# user config: {default_user_config_path()}")
        formatter.text(dump_yaml_string(config_data).rstrip())
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
