"""Glob matching over project-relative POSIX paths.

Patterns use ``fnmatch`` syntax per path segment; a ``**`` segment matches
zero or more whole segments. Directory walks never follow symlinks, so
linked module directories are not scanned twice.
"""
from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Sequence


def _match_parts(parts: Sequence[str], pats: Sequence[str]) -> bool:
    if not pats:
        return not parts
    head = pats[0]
    if head == "**":
        return any(_match_parts(parts[i:], pats[1:]) for i in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _match_parts(parts[1:], pats[1:])


def match_path(rel_path: str, pattern: str) -> bool:
    """Return True if ``rel_path`` (POSIX, relative) matches ``pattern``.

    Example:
        >>> match_path("packages/api/ci.fragment.yaml", "packages/**/*.fragment.*")
        True
        >>> match_path("packages/api/ci.fragment.yaml", "*.fragment.*")
        False
    """
    return _match_parts(rel_path.split("/"), pattern.split("/"))


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(match_path(rel_path, p) for p in patterns)


def _dir_ignored(rel_dir: str, ignore: Sequence[str]) -> bool:
    for pat in ignore:
        if pat.endswith("/**") and match_path(rel_dir, pat[:-3]):
            return True
    return False


def walk_files(
    root: Path,
    *,
    include: Sequence[str] = ("**",),
    ignore: Sequence[str] = (),
) -> List[Path]:
    """Files under ``root`` matching any ``include`` pattern and no ``ignore`` pattern.

    Results are sorted by the index of the first matching include pattern,
    then by path. Each file appears once.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    found: List[tuple] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir
        kept_dirs = []
        for name in sorted(dirnames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if not _dir_ignored(rel, ignore):
                kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if matches_any(rel, ignore):
                continue
            for index, pattern in enumerate(include):
                if match_path(rel, pattern):
                    found.append((index, rel))
                    break

    found.sort()
    return [root / rel for _, rel in found]


__all__ = ["match_path", "matches_any", "walk_files"]
