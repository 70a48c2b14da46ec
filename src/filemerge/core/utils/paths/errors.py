"""Stable error types for the paths subsystem."""

from __future__ import annotations


class FileMergePathError(ValueError):
    """Raised when path resolution fails."""

    pass


__all__ = ["FileMergePathError"]
