"""
filemerge migrate restore command.

SUMMARY: Restore files from a migration backup
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_standard_flags, get_repo_root
from filemerge.core.migration import Migrator

SUMMARY = "Restore files from a migration backup"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("timestamp", help="Backup to restore (see 'filemerge migrate backups')")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        report = Migrator(get_repo_root(args)).backups.restore(args.timestamp)
        lines = [f"Restored {len(report.restored)} file(s) from {report.timestamp}"]
        lines.extend(f"  - {path}" for path in report.restored)
        if report.hash_mismatches:
            lines.append("Hash mismatch (backup copy changed since it was taken):")
            lines.extend(f"  ! {path}" for path in report.hash_mismatches)
        if report.failed:
            lines.append("Failed:")
            lines.extend(f"  ✗ {path}" for path in report.failed)
        formatter.success(report.to_dict(), "\n".join(lines), status="success" if report.ok else "failed")
        return 0 if report.ok else 1

    except Exception as e:
        formatter.error(e)
        return 1
