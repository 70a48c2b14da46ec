from __future__ import annotations

import logging

import pytest

from filemerge.core.exceptions import UnknownStrategyError
from filemerge.core.strategies import (
    DEFAULT_STRATEGY,
    DeepMergeStrategy,
    MergeMode,
    default_registry,
    get_strategy,
)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("tsconfig.json", "tsconfig"),
        ("apps/web/tsconfig.build.json", "tsconfig"),
        ("docker-compose.yml", "docker-compose"),
        ("deployment/docker-compose.prod.yaml", "docker-compose"),
        ("compose.yaml", "docker-compose"),
        ("pnpm-workspace.yaml", "pnpm-workspace"),
        (".gitlab-ci.yml", "gitlab-ci"),
        (".vscode/tasks.json", "vscode-tasks"),
        ("apps/web/.vscode/tasks.json", "vscode-tasks"),
        (".vscode/settings.json", "deep-merge"),
        (".gitignore", "append-lines"),
        ("apps/web/.dockerignore", "append-lines"),
        (".editorconfig", "replace"),
        ("config/app.yaml", "yaml-merge"),
        ("pyproject.toml", "toml-merge"),
        ("package.json", "deep-merge"),
        ("Makefile", "deep-merge"),
    ],
)
def test_detection(path: str, expected: str) -> None:
    assert default_registry().detect(path).name == expected


def test_registry_holds_all_builtin_strategies() -> None:
    assert default_registry().names() == [
        "append-lines",
        "deep-merge",
        "docker-compose",
        "gitlab-ci",
        "pnpm-workspace",
        "replace",
        "toml-merge",
        "tsconfig",
        "vscode-tasks",
        "yaml-merge",
    ]


def test_explicit_strategy_wins_over_detection() -> None:
    assert default_registry().select("replace", "tsconfig.json").name == "replace"


def test_unknown_explicit_strategy_falls_back_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        strategy = default_registry().select("magic", "tsconfig.json")

    assert strategy.name == "tsconfig"
    assert "magic" in caplog.text


def test_get_unknown_strategy_raises() -> None:
    with pytest.raises(UnknownStrategyError) as exc_info:
        default_registry().get("magic")

    assert "available" in str(exc_info.value)
    assert "magic" not in default_registry()


def test_mode_is_passed_to_deep_strategies() -> None:
    strategy = default_registry(MergeMode.ACCUMULATE).get(DEFAULT_STRATEGY)

    assert isinstance(strategy, DeepMergeStrategy)
    assert strategy.mode is MergeMode.ACCUMULATE
    assert get_strategy(None, "a.json", "accumulate").mode is MergeMode.ACCUMULATE


def test_unknown_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        default_registry("sideways")


@pytest.mark.parametrize("name", ["docker-compose", "tsconfig", "pnpm-workspace"])
def test_mode_is_passed_to_section_strategies(name: str) -> None:
    assert default_registry(MergeMode.ACCUMULATE).get(name).mode is MergeMode.ACCUMULATE
