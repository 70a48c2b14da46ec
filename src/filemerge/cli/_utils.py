"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from filemerge.core.utils.paths import resolve_project_root

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get project root from ``--repo-root`` or auto-detect.

    Args:
        args: Parsed arguments with optional repo_root attribute

    Returns:
        Path: Project root path
    """
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return resolve_project_root()


def configure_logging(verbose: bool = False) -> None:
    """Send library logs to stderr; DEBUG when verbose, WARNING otherwise."""
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


__all__ = ["configure_logging", "get_repo_root", "LOG_FORMAT"]
