"""Domain-specific configuration accessors."""
from __future__ import annotations

from .conditions import ConditionsConfig
from .layout import LayoutConfig
from .merge import MergeConfig
from .migrate import MigrateConfig
from .watch import WatchConfig

__all__ = [
    "ConditionsConfig",
    "LayoutConfig",
    "MergeConfig",
    "MigrateConfig",
    "WatchConfig",
]
