"""
filemerge override command.

SUMMARY: Create a project override for a managed file
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_force_flag, add_standard_flags, get_repo_root
from filemerge.cli.commands.apply import print_report
from filemerge.core.management import OverrideCreator, open_in_editor

SUMMARY = "Create a project override for a managed file"

_PREVIEW_LINES = 10


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("file", help="Project-relative path of the managed file")
    parser.add_argument(
        "--extract-current",
        action="store_true",
        help="Start from the differences between the current file and its template",
    )
    parser.add_argument(
        "--template",
        choices=["json", "yaml", "text"],
        help="Skeleton format (default: the target's format)",
    )
    parser.add_argument(
        "--edit",
        action="store_true",
        help="Open the override in $EDITOR (or $VISUAL) afterwards",
    )
    add_force_flag(parser, "Overwrite an existing override")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        result = OverrideCreator(repo_root).create(
            args.file,
            extract_current=args.extract_current,
            template=args.template,
            force=args.force,
        )

        if formatter.json_mode:
            formatter.success(result.to_dict(), "")
        else:
            source = "extracted from the current file" if result.extracted else "skeleton"
            formatter.text(f"✓ Created {result.override} ({source})")
            lines = result.content.splitlines()
            formatter.text_list(lines[:_PREVIEW_LINES], prefix="    ")
            if len(lines) > _PREVIEW_LINES:
                formatter.text(f"    ... ({len(lines) - _PREVIEW_LINES} more lines)")
            if result.report is not None:
                print_report(formatter, result.report)
            formatter.text("\nTip: use null values to delete keys from the template")

        if args.edit:
            open_in_editor(repo_root / result.override)
        return 0 if result.report is None or result.report.ok else 1

    except Exception as e:
        formatter.error(e)
        return 1
