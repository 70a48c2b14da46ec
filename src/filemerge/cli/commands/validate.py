"""
filemerge validate command.

SUMMARY: Check templates, fragments and overrides without writing anything
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_standard_flags, get_repo_root
from filemerge.core.types import Severity
from filemerge.core.validation import Validator

SUMMARY = "Check templates, fragments and overrides without writing anything"

_ICONS = {Severity.ERROR: "✗", Severity.WARNING: "!", Severity.INFO: "i"}


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat warnings as errors",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        report = Validator(get_repo_root(args)).validate()
        exit_code = report.exit_code(strict=args.strict)

        if formatter.json_mode:
            formatter.success(report.to_dict(), "", status="success" if exit_code == 0 else "failed")
            return exit_code

        formatter.text(
            f"Discovered {report.templates} templates, {report.fragments} fragments, "
            f"{report.overrides} overrides"
        )
        for severity, issues in report.by_severity().items():
            if severity is Severity.INFO and not args.verbose:
                continue
            for issue in issues:
                where = f" ({issue.file})" if issue.file else ""
                formatter.text(f"  {_ICONS[severity]} [{issue.code}] {issue.message}{where}")
                if issue.suggestion:
                    formatter.text(f"      {issue.suggestion}")

        counts = {s: len(items) for s, items in report.by_severity().items()}
        formatter.text(
            f"{counts[Severity.ERROR]} errors, {counts[Severity.WARNING]} warnings, "
            f"{counts[Severity.INFO]} notices"
        )
        formatter.text("✓ Configuration is valid" if exit_code == 0 else "✗ Validation failed")
        return exit_code

    except Exception as e:
        formatter.error(e)
        return 1
