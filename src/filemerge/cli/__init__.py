"""
filemerge CLI package.

Provides the command-line interface with auto-discovery of commands
from ``commands/`` (root commands) and domain subfolders (``migrate/``).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter, format_json, print_error, print_success
from ._args import (
    add_dry_run_flag,
    add_force_flag,
    add_json_flag,
    add_repo_root_flag,
    add_standard_flags,
    add_verbose_flag,
)
from ._utils import configure_logging, get_repo_root

__all__ = [
    # Output formatting
    "OutputFormatter",
    "format_json",
    "print_success",
    "print_error",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_force_flag",
    "add_dry_run_flag",
    "add_verbose_flag",
    "add_standard_flags",
    # Utilities
    "configure_logging",
    "get_repo_root",
]
