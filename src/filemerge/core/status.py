"""Status of managed files: how each target is produced and what is on disk."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .engine import SourceResolutionEngine, normalize_target
from .types import SourceKind, TargetGroup

logger = logging.getLogger(__name__)

MODE_SYMLINKED = "symlinked"
MODE_GENERATED = "generated"
MODE_COPIED = "copied"


@dataclass
class FileStatus:
    relative_path: str
    mode: str
    sources: List[str] = field(default_factory=list)
    overrides: List[str] = field(default_factory=list)
    exists: bool = False
    is_symlink: bool = False
    link_target: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.relative_path,
            "mode": self.mode,
            "sources": list(self.sources),
            "overrides": list(self.overrides),
            "exists": self.exists,
            "is_symlink": self.is_symlink,
            "link_target": self.link_target,
            "size": self.size,
        }


@dataclass
class StatusReport:
    files: List[FileStatus] = field(default_factory=list)

    def by_mode(self, mode: str) -> List[FileStatus]:
        return [f for f in self.files if f.mode == mode]

    def summary(self) -> Dict[str, int]:
        return {
            "total": len(self.files),
            MODE_SYMLINKED: len(self.by_mode(MODE_SYMLINKED)),
            MODE_GENERATED: len(self.by_mode(MODE_GENERATED)),
            MODE_COPIED: len(self.by_mode(MODE_COPIED)),
            "missing": sum(1 for f in self.files if not f.exists),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary(), "files": [f.to_dict() for f in self.files]}


class StatusReporter:
    def __init__(
        self,
        project_root: Path,
        *,
        config: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        engine: Optional[SourceResolutionEngine] = None,
    ) -> None:
        self.engine = engine or SourceResolutionEngine(
            project_root, config=config, environ=environ, dry_run=True
        )
        self.project_root = self.engine.project_root
        self.fs = self.engine.fs

    def _mode(self, group: TargetGroup) -> str:
        if len(group.sources) > 1:
            return MODE_GENERATED
        if group.sources and group.sources[0].copy_instead_of_link:
            return MODE_COPIED
        return MODE_SYMLINKED

    def file_status(self, group: TargetGroup) -> FileStatus:
        status = FileStatus(
            relative_path=group.relative_path,
            mode=self._mode(group),
            sources=[s.describe(self.project_root) for s in group.sources],
            overrides=[
                s.describe(self.project_root) for s in group.sources if s.kind is SourceKind.OVERRIDE
            ],
        )
        target = group.target
        status.exists = self.fs.exists(target)
        if status.exists:
            status.is_symlink = self.fs.is_symlink(target)
            if status.is_symlink:
                status.link_target = str(self.fs.readlink(target))
            elif not self.fs.is_dir(target):
                status.size = self.fs.lstat_size(target)
        return status

    def report(self, file: Optional[str] = None) -> StatusReport:
        """Status of every managed target, or only of ``file`` when given.

        An unmanaged ``file`` yields an empty report.
        """
        engine = self.engine
        discovered = engine.discover()
        engine.modules.invalidate()
        wanted = normalize_target(file) if file else None

        report = StatusReport()
        for group in engine.build_groups(discovered):
            if wanted is not None and group.relative_path != wanted:
                continue
            report.files.append(self.file_status(group))
        logger.debug("Status collected for %d files", len(report.files))
        return report


__all__ = [
    "FileStatus",
    "MODE_COPIED",
    "MODE_GENERATED",
    "MODE_SYMLINKED",
    "StatusReport",
    "StatusReporter",
]
