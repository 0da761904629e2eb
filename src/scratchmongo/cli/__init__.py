"""
scratchmongo CLI package.

Provides the command-line interface with auto-discovery of commands
from ``cli/commands``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
"""
from ._args import add_json_flag, add_mongo_version_arg
from ._output import OutputFormatter, format_json, print_error

__all__ = [
    # Output formatting
    "OutputFormatter",
    "format_json",
    "print_error",
    # Argument helpers
    "add_json_flag",
    "add_mongo_version_arg",
]
