from __future__ import annotations

import os
from pathlib import Path

import pytest

from filemerge.core.utils.globs import match_path, matches_any, walk_files


@pytest.mark.parametrize(
    "path, pattern, expected",
    [
        ("packages/api/ci.fragment.yaml", "packages/**/*.fragment.*", True),
        ("packages/ci.fragment.yaml", "packages/**/*.fragment.*", True),
        ("ci.fragment.yaml", "*.fragment.*", True),
        ("packages/api/ci.fragment.yaml", "*.fragment.*", False),
        ("a/node_modules/b/c.json", "**/node_modules/**", True),
        ("node_modules/c.json", "**/node_modules/**", True),
        ("apps/web/tsconfig.overrides.json", "**/*.overrides.*", True),
        (".filemerge/backups/x/tsconfig.json", ".filemerge/**", True),
    ],
)
def test_match_path(path: str, pattern: str, expected: bool) -> None:
    assert match_path(path, pattern) is expected


def test_matches_any() -> None:
    assert matches_any("dist/a.js", ["**/node_modules/**", "**/dist/**"])
    assert not matches_any("src/a.js", ["**/node_modules/**", "**/dist/**"])


def _touch(root: Path, rel: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{}", encoding="utf-8")


def test_walk_files_orders_by_pattern_then_path(tmp_path: Path) -> None:
    for rel in ("b.fragment.json", "packages/z/x.fragment.json", "packages/a/x.fragment.json", "a.fragment.json"):
        _touch(tmp_path, rel)

    found = walk_files(tmp_path, include=["packages/**/*.fragment.*", "*.fragment.*"])

    assert [p.relative_to(tmp_path).as_posix() for p in found] == [
        "packages/a/x.fragment.json",
        "packages/z/x.fragment.json",
        "a.fragment.json",
        "b.fragment.json",
    ]


def test_walk_files_prunes_ignored_directories(tmp_path: Path) -> None:
    _touch(tmp_path, "packages/api/x.fragment.json")
    _touch(tmp_path, "packages/api/node_modules/dep/x.fragment.json")

    found = walk_files(tmp_path, include=["**/*.fragment.*"], ignore=["**/node_modules/**"])

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["packages/api/x.fragment.json"]


def test_walk_files_does_not_follow_directory_links(tmp_path: Path) -> None:
    _touch(tmp_path, "atom-framework/modules/auth/x.fragment.json")
    (tmp_path / "modules").mkdir()
    os.symlink("../atom-framework/modules/auth", tmp_path / "modules" / "auth")

    found = walk_files(tmp_path, include=["**/*.fragment.*"])

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["atom-framework/modules/auth/x.fragment.json"]


def test_walk_files_on_missing_root(tmp_path: Path) -> None:
    assert walk_files(tmp_path / "missing") == []
