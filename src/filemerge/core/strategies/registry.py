"""Strategy registry and auto-detection from target paths.

Detection rules are ordered most specific first; the first rule matching the
target's project-relative path wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from functools import lru_cache
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Tuple, Union

from ..exceptions import UnknownStrategyError
from .base import MergeStrategy
from .deep import DeepMergeStrategy, MergeMode, TomlMergeStrategy, YamlMergeStrategy
from .docker_compose import DockerComposeMergeStrategy
from .gitlab_ci import GitLabCIMergeStrategy
from .pnpm_workspace import PnpmWorkspaceMergeStrategy
from .text import AppendLinesStrategy, ReplaceStrategy
from .tsconfig import TsConfigMergeStrategy
from .vscode_tasks import VSCodeTasksMergeStrategy

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = "deep-merge"

IGNORE_FILES = (".gitignore", ".dockerignore", ".npmignore", ".prettierignore", ".eslintignore")


@dataclass(frozen=True)
class DetectionRule:
    """Select ``strategy`` when the file name (or, with ``on_path``, the relative path) matches."""

    strategy: str
    patterns: Tuple[str, ...]
    on_path: bool = False

    def matches(self, relative_path: str) -> bool:
        subject = relative_path.lower()
        if not self.on_path:
            subject = PurePosixPath(subject).name
        return any(fnmatchcase(subject, pattern) for pattern in self.patterns)


DETECTION_RULES: Tuple[DetectionRule, ...] = (
    DetectionRule("tsconfig", ("tsconfig*.json",)),
    DetectionRule("docker-compose", ("*docker-compose*", "compose.yaml", "compose.yml")),
    DetectionRule("pnpm-workspace", ("pnpm-workspace.yaml", "pnpm-workspace.yml")),
    DetectionRule("gitlab-ci", ("*gitlab-ci*",)),
    DetectionRule("vscode-tasks", (".vscode/tasks.json", "*/.vscode/tasks.json"), on_path=True),
    DetectionRule("append-lines", IGNORE_FILES),
    DetectionRule("replace", (".editorconfig",)),
    DetectionRule("yaml-merge", ("*.yaml", "*.yml")),
    DetectionRule("toml-merge", ("*.toml",)),
    DetectionRule("deep-merge", ("*.json", "*.jsonc", "*.json5", "*.code-workspace")),
)


class StrategyRegistry:
    def __init__(self, rules: Tuple[DetectionRule, ...] = DETECTION_RULES) -> None:
        self._strategies: Dict[str, MergeStrategy] = {}
        self.rules = rules

    def register(self, strategy: MergeStrategy) -> None:
        if not strategy.name:
            raise ValueError(f"Strategy {strategy!r} has no name")
        self._strategies[strategy.name] = strategy

    def names(self) -> List[str]:
        return sorted(self._strategies)

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def get(self, name: str) -> MergeStrategy:
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(
                f"Unknown merge strategy '{name}' (available: {', '.join(self.names())})",
                context={"strategy": name},
            ) from None

    def detect(self, relative_path: str) -> MergeStrategy:
        """Strategy for a project-relative target path."""
        for rule in self.rules:
            if rule.matches(relative_path) and rule.strategy in self._strategies:
                return self._strategies[rule.strategy]
        return self.get(DEFAULT_STRATEGY)

    def select(self, explicit: Optional[str], relative_path: str) -> MergeStrategy:
        """Explicit strategy when registered, else auto-detection."""
        if explicit:
            if explicit in self._strategies:
                return self._strategies[explicit]
            logger.warning(
                "Unknown merge strategy '%s' for %s; auto-detecting instead",
                explicit,
                relative_path,
            )
        return self.detect(relative_path)


def default_registry(mode: Union[str, MergeMode, None] = MergeMode.OVERLAY) -> StrategyRegistry:
    """Registry holding every built-in strategy, deep merges using ``mode``."""
    merge_mode = MergeMode.coerce(mode)
    registry = StrategyRegistry()
    for strategy in (
        DeepMergeStrategy(merge_mode),
        YamlMergeStrategy(merge_mode),
        TomlMergeStrategy(merge_mode),
        AppendLinesStrategy(),
        ReplaceStrategy(),
        DockerComposeMergeStrategy(merge_mode),
        TsConfigMergeStrategy(merge_mode),
        VSCodeTasksMergeStrategy(),
        GitLabCIMergeStrategy(),
        PnpmWorkspaceMergeStrategy(merge_mode),
    ):
        registry.register(strategy)
    return registry


@lru_cache(maxsize=4)
def _shared_registry(mode: MergeMode) -> StrategyRegistry:
    return default_registry(mode)


def get_strategy(
    name: Optional[str],
    relative_path: str,
    mode: Union[str, MergeMode, None] = MergeMode.OVERLAY,
) -> MergeStrategy:
    """Strategy by explicit name, falling back to detection from ``relative_path``."""
    return _shared_registry(MergeMode.coerce(mode)).select(name, relative_path)


__all__ = [
    "DEFAULT_STRATEGY",
    "DETECTION_RULES",
    "DetectionRule",
    "IGNORE_FILES",
    "StrategyRegistry",
    "default_registry",
    "get_strategy",
]
