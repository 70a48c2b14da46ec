"""Domain-specific configuration for watch mode."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class WatchConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "watch"

    @cached_property
    def debounce_seconds(self) -> float:
        return float(self.section.get("debounce_seconds", 0.3))


__all__ = ["WatchConfig"]
