"""
filemerge remove command.

SUMMARY: Stop managing a file and restore it as a regular file
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_standard_flags, get_repo_root
from filemerge.core.management import FileManager

SUMMARY = "Stop managing a file and restore it as a regular file"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("file", help="Project-relative path of the managed file")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        result = FileManager(get_repo_root(args)).remove(args.file)
        lines = [f"✓ Removed {result.file} from management", f"  Restored: {result.file}"]
        lines.extend(f"  Deleted: {path}" for path in result.removed)
        if result.gitignore_updated:
            lines.append(f"  Removed from .gitignore: {result.file}")
        formatter.success(result.to_dict(), "\n".join(lines))
        return 0

    except Exception as e:
        formatter.error(e)
        return 1
