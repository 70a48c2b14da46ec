"""
filemerge migrate analyze command.

SUMMARY: Classify existing files against their templates
"""

from __future__ import annotations

import argparse

from filemerge.cli import OutputFormatter, add_standard_flags, get_repo_root
from filemerge.core.migration import Migrator

SUMMARY = "Classify existing files against their templates"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        analysis = Migrator(get_repo_root(args)).analyze()
        if formatter.json_mode:
            formatter.json_output(analysis.to_dict())
            return 0

        formatter.text(f"Identical to template ({len(analysis.identical)}):")
        formatter.text_list(analysis.identical)
        formatter.text(f"\nExtractable ({len(analysis.extractable)}):")
        formatter.text_list(f"{e.file} ({e.changes} changes)" for e in analysis.extractable)
        formatter.text(f"\nNeeds manual review ({len(analysis.needs_review)}):")
        formatter.text_list(analysis.needs_review)
        if analysis.errors:
            formatter.text(f"\nErrors ({len(analysis.errors)}):")
            formatter.text_list(f"{file}: {error}" for file, error in analysis.errors)
        if analysis.extractable:
            formatter.text("\nNext: filemerge migrate extract")
        return 1 if analysis.errors else 0

    except Exception as e:
        formatter.error(e)
        return 1
