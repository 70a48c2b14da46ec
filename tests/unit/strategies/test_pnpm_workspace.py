from __future__ import annotations

from pathlib import Path

import pytest

from filemerge.core.exceptions import MergeConflictError
from filemerge.core.strategies import MergeMode, PnpmWorkspaceMergeStrategy
from filemerge.core.types import MergeContext

CTX = MergeContext(target_path=Path("/proj/pnpm-workspace.yaml"), relative_path="pnpm-workspace.yaml")


def test_packages_union_and_catalogs_deep_merge() -> None:
    result = PnpmWorkspaceMergeStrategy().run(
        [
            {"packages": ["apps/*", "packages/*"], "catalogs": {"react18": {"react": "^18.2.0"}}},
            {"packages": ["packages/*", "tools/*"], "catalogs": {"react18": {"react-dom": "^18.2.0"}}},
        ],
        CTX,
    )

    assert result == {
        "packages": ["apps/*", "packages/*", "tools/*"],
        "catalogs": {"react18": {"react": "^18.2.0", "react-dom": "^18.2.0"}},
    }


def test_other_keys_last_wins() -> None:
    result = PnpmWorkspaceMergeStrategy().run(
        [{"onlyBuiltDependencies": ["esbuild"]}, {"onlyBuiltDependencies": ["sharp"]}],
        CTX,
    )

    assert result == {"onlyBuiltDependencies": ["sharp"]}


def test_single_source_identity() -> None:
    content = {"packages": ["apps/*"], "catalog": {"zod": "^3"}}

    assert PnpmWorkspaceMergeStrategy().run([content], CTX) == content


def test_null_sections_are_removed_in_overlay_mode() -> None:
    result = PnpmWorkspaceMergeStrategy().run(
        [{"packages": ["apps/*"], "catalogs": {"react18": {"react": "^18"}}}, {"packages": None, "catalogs": None}],
        CTX,
    )

    assert result == {}


@pytest.mark.parametrize(
    "earlier, later",
    [
        ({"catalogs": {"react18": {"react": "^18"}}}, {"catalogs": None}),
        ({"packages": ["apps/*"]}, {"packages": None}),
    ],
)
def test_null_section_conflicts_in_accumulate_mode(earlier: dict, later: dict) -> None:
    with pytest.raises(MergeConflictError):
        PnpmWorkspaceMergeStrategy(MergeMode.ACCUMULATE).run([earlier, later], CTX)
