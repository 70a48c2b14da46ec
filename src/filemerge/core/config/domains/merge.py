"""Domain-specific configuration for merging managed files."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class MergeConfig(BaseDomainConfig):
    """Typed access to the ``merge`` section.

    ``mode`` selects the deep-merge policy (``overlay`` or ``accumulate``).
    """

    def _config_section(self) -> str:
        return "merge"

    @cached_property
    def mode(self) -> str:
        return str(self.section.get("mode", "overlay"))

    @cached_property
    def strict_validation(self) -> bool:
        return bool(self.section.get("strict_validation", False))

    @cached_property
    def max_workers(self) -> int:
        return max(1, int(self.section.get("max_workers", 1)))

    @cached_property
    def headers(self) -> bool:
        return bool(self.section.get("headers", True))


__all__ = ["MergeConfig"]
