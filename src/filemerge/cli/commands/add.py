"""
filemerge add command.

SUMMARY: Put an existing file under management
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_force_flag, add_standard_flags, get_repo_root
from filemerge.core.management import FileManager

SUMMARY = "Put an existing file under management"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("file", help="Project-relative path of the file to manage")
    add_force_flag(parser, "Overwrite an existing template")
    parser.add_argument(
        "--no-symlink",
        action="store_true",
        help="Copy the template back instead of linking it",
    )
    parser.add_argument(
        "--keep-original",
        action="store_true",
        help="Also keep the current content as an override",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        result = FileManager(get_repo_root(args)).add(
            args.file,
            force=args.force,
            no_symlink=args.no_symlink,
            keep_original=args.keep_original,
        )
        lines = [
            f"✓ Added {result.file} to management",
            f"  Template: {result.template}",
            f"  {'Copied back' if result.copied else 'Linked'}: {result.file}",
        ]
        if result.gitignore_updated:
            lines.append(f"  Added to .gitignore: {result.file}")
        if result.override:
            lines.append(f"  Kept original as override: {result.override}")
        lines.append(f"\nTo add project-specific overrides: filemerge override {result.file}")
        formatter.success(result.to_dict(), "\n".join(lines))
        return 0

    except Exception as e:
        formatter.error(e)
        return 1
