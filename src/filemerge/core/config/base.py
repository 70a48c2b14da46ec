"""Base class for domain-specific configuration accessors.

Provides a standardized pattern for all domain configs with:
- Centralized caching via cache.py
- Consistent repo_root handling
- Type-safe section access
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Optional

from .cache import get_cached_config


class BaseDomainConfig(ABC):
    """Abstract base class for domain-specific configuration accessors.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("mySetting", "default")

    ``config`` may be passed explicitly (already-loaded dict) to bypass the
    cache, which keeps engines and tests independent of the project tree.
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._repo_root = repo_root
        if config is not None:
            self._config = config
        else:
            self._config = get_cached_config(repo_root=repo_root, validate=True)

    @property
    def repo_root(self) -> Path:
        if self._repo_root:
            return Path(self._repo_root)
        from filemerge.core.utils.paths import resolve_project_root

        return resolve_project_root()

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level config key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """Get this domain's configuration section (empty dict when absent)."""
        return self._config.get(self._config_section(), {}) or {}


__all__ = ["BaseDomainConfig"]
