"""Domain-specific configuration for migration (override extraction, backups)."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class MigrateConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "migrate"

    @cached_property
    def backup_dir(self) -> str:
        return str(self.section.get("backup_dir", ".filemerge/backups"))

    @cached_property
    def backup_retention(self) -> int:
        return int(self.section.get("backup_retention", 10))

    @cached_property
    def review_threshold(self) -> int:
        return int(self.section.get("review_threshold", 20))

    @cached_property
    def default_strategy(self) -> str:
        return str(self.section.get("default_strategy", "smart"))

    def backup_root(self, project_root: Path) -> Path:
        return Path(project_root) / self.backup_dir


__all__ = ["MigrateConfig"]
