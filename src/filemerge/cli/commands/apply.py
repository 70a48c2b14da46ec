"""
filemerge apply command.

SUMMARY: Regenerate managed files from templates, fragments and overrides
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_dry_run_flag, add_standard_flags, get_repo_root
from filemerge.core.engine import (
    ACTION_COPY,
    ACTION_MERGE,
    ACTION_REMOVE,
    ACTION_SYMLINK,
    ACTION_UNCHANGED,
    ApplyReport,
    SourceResolutionEngine,
)
from filemerge.core.exceptions import ApplyError

SUMMARY = "Regenerate managed files from templates, fragments and overrides"

_LABELS = {
    ACTION_SYMLINK: "Linked",
    ACTION_COPY: "Copied",
    ACTION_MERGE: "Merged",
    ACTION_REMOVE: "Removed",
    ACTION_UNCHANGED: "Unchanged",
}


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_dry_run_flag(parser)
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="GLOB",
        help="Only process targets matching GLOB (repeatable)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail a target when any of its sources fails strategy validation",
    )
    add_standard_flags(parser)


def print_report(formatter: OutputFormatter, report: ApplyReport, *, verbose: bool = False) -> None:
    title = "Dry run: no files were written" if report.dry_run else "Configuration applied"
    formatter.text(title)
    active = ", ".join(sorted(report.active_modules)) or "none"
    formatter.text_kv("Active modules", active)
    formatter.text_kv(
        "Sources",
        f"{report.templates} templates, {report.fragments} fragments "
        f"({report.fragments_used} used), {report.overrides} overrides",
    )
    counts = ", ".join(
        f"{label}: {report.count(action)}" for action, label in _LABELS.items() if report.count(action)
    )
    formatter.text_kv("Targets", counts or "nothing to do")
    if verbose:
        for result in report.results:
            strategy = f" [{result.strategy}]" if result.strategy else ""
            formatter.text(f"    {result.action:<9} {result.relative_path}{strategy}")
            for source in result.sources:
                formatter.text(f"              <- {source}")
            for warning in result.warnings:
                formatter.text(f"              ! {warning}")
    for failure in report.failures:
        formatter.text(f"  FAILED {failure.message}")


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        engine = SourceResolutionEngine(
            repo_root,
            dry_run=args.dry_run,
            filters=args.filter,
            strict=True if args.strict else None,
        )
        report = engine.apply()

        if formatter.json_mode:
            formatter.success(report.to_dict(), "", status="success" if report.ok else "failed")
        else:
            print_report(formatter, report, verbose=args.verbose)

        if not report.ok:
            raise ApplyError(
                f"{len(report.failures)} target(s) failed; first: {report.failures[0].message}",
                context={"failures": [f.to_dict() for f in report.failures]},
            )
        return 0

    except Exception as e:
        formatter.error(e)
        return 1
