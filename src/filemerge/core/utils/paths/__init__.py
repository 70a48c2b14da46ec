"""Path utilities for filemerge."""
from __future__ import annotations

from .errors import FileMergePathError
from .resolver import (
    PROJECT_CONFIG_DIRNAME,
    PROJECT_ROOT_ENV,
    get_project_config_dir,
    resolve_project_root,
)

__all__ = [
    "FileMergePathError",
    "PROJECT_CONFIG_DIRNAME",
    "PROJECT_ROOT_ENV",
    "get_project_config_dir",
    "resolve_project_root",
]
