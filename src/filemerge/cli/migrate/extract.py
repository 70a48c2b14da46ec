"""
filemerge migrate extract command.

SUMMARY: Write override files holding each file's differences from its template
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_force_flag, add_standard_flags, get_repo_root
from filemerge.core.migration import ExtractionStrategy, Migrator

SUMMARY = "Write override files holding each file's differences from its template"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in ExtractionStrategy],
        default=None,
        help="Diff strategy (default: migrate.default_strategy)",
    )
    add_force_flag(parser, "Overwrite existing override files")
    parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Skip backing up the files before extraction",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        report = Migrator(get_repo_root(args)).extract(
            args.strategy,
            force=args.force,
            backup=not args.no_backup,
        )
        if formatter.json_mode:
            formatter.json_output(report.to_dict())
            return 1 if report.errors else 0

        if report.backup:
            formatter.text(f"Backup: {report.backup} (restore with: filemerge migrate restore {report.backup})")
        formatter.text(f"Created ({len(report.created)}):")
        formatter.text_list(f"{e.file} ({e.changes} changes)" for e in report.created)
        if report.existing:
            formatter.text(f"\nSkipped, override exists ({len(report.existing)}); use --force:")
            formatter.text_list(report.existing)
        if report.unchanged:
            formatter.text(f"\nNo differences ({len(report.unchanged)}):")
            formatter.text_list(report.unchanged)
        if report.errors:
            formatter.text(f"\nErrors ({len(report.errors)}):")
            formatter.text_list(f"{file}: {error}" for file, error in report.errors)
        if report.created:
            formatter.text("\nNext: filemerge apply")
        return 1 if report.errors else 0

    except Exception as e:
        formatter.error(e)
        return 1
