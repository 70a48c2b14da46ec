"""Domain-specific configuration for the on-disk project layout.

Describes where templates, fragments, overrides and modules live relative to
the project root.
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import List

from ..base import BaseDomainConfig


class LayoutConfig(BaseDomainConfig):
    """Typed access to the ``layout`` section."""

    def _config_section(self) -> str:
        return "layout"

    def _list(self, key: str) -> List[str]:
        value = self.section.get(key) or []
        return [str(v) for v in value]

    @cached_property
    def framework_dir(self) -> str:
        return str(self.section.get("framework_dir", "atom-framework"))

    @cached_property
    def templates_dir(self) -> str:
        return str(self.section.get("templates_dir", "atom-framework/config-templates"))

    @cached_property
    def template_prefix(self) -> str:
        return str(self.section.get("template_prefix", "__"))

    @cached_property
    def modules_dir(self) -> str:
        return str(self.section.get("modules_dir", "modules"))

    @cached_property
    def framework_modules_dir(self) -> str:
        return str(self.section.get("framework_modules_dir", "atom-framework/modules"))

    @cached_property
    def fragment_globs(self) -> List[str]:
        return self._list("fragment_globs")

    @cached_property
    def override_glob(self) -> str:
        return str(self.section.get("override_glob", "**/*.overrides.*"))

    @cached_property
    def ignore_globs(self) -> List[str]:
        return self._list("ignore_globs")

    @cached_property
    def fragment_ignore_globs(self) -> List[str]:
        return self._list("fragment_ignore_globs")

    @cached_property
    def override_ignore_globs(self) -> List[str]:
        return self._list("override_ignore_globs")

    def templates_root(self, project_root: Path) -> Path:
        """Absolute templates directory for ``project_root``."""
        return Path(project_root) / self.templates_dir

    def modules_root(self, project_root: Path) -> Path:
        return Path(project_root) / self.modules_dir

    def framework_modules_root(self, project_root: Path) -> Path:
        return Path(project_root) / self.framework_modules_dir


__all__ = ["LayoutConfig"]
