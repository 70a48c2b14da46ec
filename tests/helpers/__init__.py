"""Test helpers for the filemerge test suite.

- project: ProjectDir, a throwaway project tree with write/link helpers
- fake_fs: FakeFileSystem, an in-memory implementation of the filesystem adapter
- cache_utils: cache reset for test isolation
"""
from __future__ import annotations

from .cache_utils import reset_filemerge_caches
from .fake_fs import FakeFileSystem
from .project import ProjectDir

__all__ = ["FakeFileSystem", "ProjectDir", "reset_filemerge_caches"]
