"""Domain-specific configuration for fragment conditions."""
from __future__ import annotations

from functools import cached_property
from typing import Mapping

from ..base import BaseDomainConfig


class ConditionsConfig(BaseDomainConfig):
    """Typed access to the ``conditions`` section."""

    def _config_section(self) -> str:
        return "conditions"

    @cached_property
    def env_var(self) -> str:
        return str(self.section.get("env_var", "NODE_ENV"))

    @cached_property
    def default_env(self) -> str:
        return str(self.section.get("default_env", "development"))

    def current_env(self, environ: Mapping[str, str]) -> str:
        """Runtime environment name read from ``environ``."""
        return environ.get(self.env_var) or self.default_env


__all__ = ["ConditionsConfig"]
