"""Merge strategies for managed configuration files."""
from __future__ import annotations

from .base import MergeStrategy, ObjectMergeStrategy
from .deep import (
    DeepMergeStrategy,
    MergeMode,
    TomlMergeStrategy,
    YamlMergeStrategy,
    deep_merge_all,
    loose_equal,
    merge_objects,
)
from .docker_compose import DockerComposeMergeStrategy
from .gitlab_ci import GitLabCIMergeStrategy, is_master_template, job_prefix
from .pnpm_workspace import PnpmWorkspaceMergeStrategy
from .registry import (
    DEFAULT_STRATEGY,
    DetectionRule,
    StrategyRegistry,
    default_registry,
    get_strategy,
)
from .text import AppendLinesStrategy, ReplaceStrategy
from .tsconfig import TsConfigMergeStrategy
from .vscode_tasks import VSCodeTasksMergeStrategy

__all__ = [
    "MergeStrategy",
    "ObjectMergeStrategy",
    "MergeMode",
    "DeepMergeStrategy",
    "YamlMergeStrategy",
    "TomlMergeStrategy",
    "AppendLinesStrategy",
    "ReplaceStrategy",
    "DockerComposeMergeStrategy",
    "TsConfigMergeStrategy",
    "VSCodeTasksMergeStrategy",
    "GitLabCIMergeStrategy",
    "PnpmWorkspaceMergeStrategy",
    "StrategyRegistry",
    "DetectionRule",
    "DEFAULT_STRATEGY",
    "default_registry",
    "get_strategy",
    "deep_merge_all",
    "merge_objects",
    "loose_equal",
    "is_master_template",
    "job_prefix",
]
