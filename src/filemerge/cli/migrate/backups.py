"""
filemerge migrate backups command.

SUMMARY: List migration backups, newest first
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_standard_flags, get_repo_root
from filemerge.core.migration import Migrator

SUMMARY = "List migration backups, newest first"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        backups = Migrator(get_repo_root(args)).backups
        timestamps = backups.list_backups()
        if formatter.json_mode:
            formatter.json_output({"backup_root": str(backups.backup_root), "backups": timestamps})
            return 0
        if not timestamps:
            formatter.text("No backups found")
            return 0
        formatter.text(f"Backups in {backups.backup_root}:")
        formatter.text_list(timestamps)
        return 0

    except Exception as e:
        formatter.error(e)
        return 1
