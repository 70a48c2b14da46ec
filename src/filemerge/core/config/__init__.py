"""filemerge configuration system.

Usage:
    from filemerge.core.config import ConfigManager
    from filemerge.core.config.domains import LayoutConfig

    manager = ConfigManager(repo_root=Path("/path/to/project"))
    config = manager.load_config()

    layout = LayoutConfig(repo_root=Path("/path/to/project"))
    layout.templates_dir
"""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config, is_cached, register_cache_clearer
from .domains import (
    ConditionsConfig,
    LayoutConfig,
    MergeConfig,
    MigrateConfig,
    WatchConfig,
)
from .manager import ConfigManager

__all__ = [
    "ConfigManager",
    "BaseDomainConfig",
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
    "register_cache_clearer",
    "LayoutConfig",
    "MergeConfig",
    "ConditionsConfig",
    "MigrateConfig",
    "WatchConfig",
]
