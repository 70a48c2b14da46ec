"""Shared pieces for source discoverers."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.domains import LayoutConfig
from ..fs import FileSystem, LocalFileSystem
from ..types import Source, SourceKind
from ..variables import TemplateVariableResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedSource:
    """A candidate file that discovery rejected, and why."""

    kind: SourceKind
    location: Path
    reason: str
    code: str = "SOURCE_SKIPPED"


@dataclass
class DiscoveredSources:
    templates: List[Source] = field(default_factory=list)
    fragments: List[Source] = field(default_factory=list)
    overrides: List[Source] = field(default_factory=list)
    skipped: List[SkippedSource] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.templates) + len(self.fragments) + len(self.overrides)


class SourceDiscovery:
    """Base class holding the collaborators every discoverer needs."""

    kind: SourceKind

    def __init__(
        self,
        project_root: Path,
        *,
        layout: Optional[LayoutConfig] = None,
        resolver: Optional[TemplateVariableResolver] = None,
        fs: Optional[FileSystem] = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.layout = layout or LayoutConfig(repo_root=self.project_root)
        self.resolver = resolver or TemplateVariableResolver()
        self.fs: FileSystem = fs or LocalFileSystem()
        self.skipped: List[SkippedSource] = []

    def _skip(self, location: Path, reason: str, code: str = "SOURCE_SKIPPED") -> None:
        logger.warning("Skipping %s %s: %s", self.kind.value, self._rel(location), reason)
        self.skipped.append(SkippedSource(kind=self.kind, location=location, reason=reason, code=code))

    def _rel(self, path: Path) -> str:
        try:
            return Path(path).relative_to(self.project_root).as_posix()
        except ValueError:
            return str(path)

    def discover(self) -> List[Source]:
        raise NotImplementedError


__all__ = ["SkippedSource", "DiscoveredSources", "SourceDiscovery"]
