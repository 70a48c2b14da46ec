"""
filemerge watch command.

SUMMARY: Watch sources and re-apply on change
"""

from __future__ import annotations

import argparse
import time

from filemerge.cli import OutputFormatter, add_repo_root_flag, add_verbose_flag, get_repo_root
from filemerge.cli.commands.apply import print_report
from filemerge.core.engine import ApplyReport, SourceResolutionEngine
from filemerge.core.watch import ConfigWatcher

SUMMARY = "Watch sources and re-apply on change"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--debounce",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Delay before regenerating after the last change (default: watch.debounce_seconds)",
    )
    parser.add_argument(
        "--no-initial",
        action="store_true",
        help="Do not apply once before watching",
    )
    add_repo_root_flag(parser)
    add_verbose_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter()

    try:
        repo_root = get_repo_root(args)

        def on_report(report: ApplyReport) -> None:
            print_report(formatter, report, verbose=args.verbose)

        def on_error(error: Exception) -> None:
            formatter.error(error)

        watcher = ConfigWatcher(
            repo_root,
            debounce_seconds=args.debounce,
            on_report=on_report,
            on_error=on_error,
        )
        if not args.no_initial:
            on_report(SourceResolutionEngine(repo_root).apply())

        watcher.start()
        formatter.text(f"Watching {repo_root} for changes (Ctrl+C to stop)")
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            formatter.text("\nStopping watcher")
        finally:
            watcher.stop()
        return 0

    except Exception as e:
        formatter.error(e)
        return 1
