"""Shared utilities for filemerge (I/O, merging, path resolution)."""
