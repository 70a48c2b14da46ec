"""Project root resolution for filemerge.

Resolution priority:
1. ``FILEMERGE_PROJECT_ROOT`` environment variable
2. Nearest ancestor of the current directory containing ``.filemerge/``
3. Git repository root via ``git rev-parse --show-toplevel``
4. The current working directory
"""
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

from .errors import FileMergePathError

PROJECT_ROOT_ENV = "FILEMERGE_PROJECT_ROOT"
PROJECT_CONFIG_DIRNAME = ".filemerge"


def _find_marker_root(start: Path) -> Optional[Path]:
    for candidate in (start, *start.parents):
        if (candidate / PROJECT_CONFIG_DIRNAME).is_dir():
            return candidate
    return None


def _git_toplevel(cwd: Path) -> Optional[Path]:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    out = result.stdout.strip()
    return Path(out).resolve() if out else None


def resolve_project_root(cwd: Optional[Path] = None) -> Path:
    """Resolve the project root with fail-fast validation of env overrides.

    Raises:
        FileMergePathError: If ``FILEMERGE_PROJECT_ROOT`` points at a missing
            path or at the ``.filemerge`` directory itself.
    """
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.is_dir():
            raise FileMergePathError(f"{PROJECT_ROOT_ENV} points at missing path: {env_path}")
        if env_path.name == PROJECT_CONFIG_DIRNAME:
            raise FileMergePathError(
                f"{PROJECT_ROOT_ENV} points to the {PROJECT_CONFIG_DIRNAME} directory: {env_path}. "
                "It must point to the project root."
            )
        return env_path

    start = (cwd or Path.cwd()).resolve()
    marker_root = _find_marker_root(start)
    if marker_root is not None:
        return marker_root

    git_root = _git_toplevel(start)
    if git_root is not None:
        return git_root

    return start


def get_project_config_dir(project_root: Path) -> Path:
    """Return ``<project>/.filemerge``."""
    return Path(project_root) / PROJECT_CONFIG_DIRNAME


__all__ = [
    "PROJECT_ROOT_ENV",
    "PROJECT_CONFIG_DIRNAME",
    "resolve_project_root",
    "get_project_config_dir",
]
