"""
filemerge status command.

SUMMARY: Show how each managed file is produced
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_standard_flags, get_repo_root
from filemerge.core.exceptions import ManagementError
from filemerge.core.status import MODE_COPIED, MODE_GENERATED, MODE_SYMLINKED, FileStatus, StatusReporter

SUMMARY = "Show how each managed file is produced"

_LIMIT = 10


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("file", nargs="?", help="Show details for one target file")
    add_standard_flags(parser)


def _print_detail(formatter: OutputFormatter, status: FileStatus) -> None:
    formatter.text(f"File: {status.relative_path}")
    formatter.text_kv("Mode", status.mode)
    formatter.text_kv("Sources", len(status.sources))
    formatter.text_list(status.sources, prefix="    - ")
    if not status.exists:
        formatter.text("  File does not exist on disk (run 'filemerge apply')")
    elif status.is_symlink:
        formatter.text(f"  On disk: symlink -> {status.link_target}")
    else:
        formatter.text(f"  On disk: regular file ({status.size} bytes)")
    if status.mode == MODE_SYMLINKED:
        formatter.text(f"  To customize: filemerge override {status.relative_path}")
    elif status.overrides:
        formatter.text("  Overrides:")
        formatter.text_list(status.overrides, prefix="    - ")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        report = StatusReporter(get_repo_root(args)).report(args.file)

        if args.file and not report.files:
            raise ManagementError(
                f"File not managed: {args.file} (to add it: filemerge add {args.file})",
                context={"file": args.file},
            )

        if formatter.json_mode:
            formatter.json_output(report.to_dict())
            return 0

        if args.file:
            _print_detail(formatter, report.files[0])
            return 0

        summary = report.summary()
        formatter.text(f"Managed files ({summary['total']}):")
        symlinked = report.by_mode(MODE_SYMLINKED)
        if symlinked:
            formatter.text("\nSymlinked (single source):")
            formatter.text_list(
                (f"{s.relative_path:<30} <- {s.sources[0]}" for s in symlinked), limit=_LIMIT
            )
        generated = report.by_mode(MODE_GENERATED)
        if generated:
            formatter.text("\nGenerated (multiple sources):")
            formatter.text_list(
                (f"{s.relative_path} ({len(s.sources)} sources)" for s in generated), limit=_LIMIT
            )
        copied = report.by_mode(MODE_COPIED)
        if copied:
            formatter.text("\nCopied:")
            formatter.text_list((s.relative_path for s in copied), limit=_LIMIT)
        if summary["missing"]:
            formatter.text(f"\n{summary['missing']} file(s) missing on disk; run 'filemerge apply'")
        return 0

    except Exception as e:
        formatter.error(e)
        return 1
