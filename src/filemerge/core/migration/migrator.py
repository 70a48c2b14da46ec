"""Migration of hand-maintained files onto templates.

``analyze()`` classifies every existing target that has a template;
``extract()`` writes the differences into override files so the next
``apply()`` reproduces the current content from template + override.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..codecs import Format, detect_format, parse, stringify
from ..config.cache import get_cached_config
from ..config.domains import LayoutConfig, MigrateConfig
from ..discovery import TemplateDiscovery
from ..discovery.overrides import override_name_for
from ..exceptions import CodecError
from ..headers import strip_header
from ..types import ConfigValue, Source
from ..utils.io import write_text
from ..variables import TemplateVariableResolver
from .backup import BackupManager
from .diff import DiffExtractor, ExtractionStrategy, has_content

logger = logging.getLogger(__name__)


@dataclass
class ExtractableFile:
    file: str
    changes: int


@dataclass
class MigrationAnalysis:
    identical: List[str] = field(default_factory=list)
    extractable: List[ExtractableFile] = field(default_factory=list)
    needs_review: List[str] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identical": list(self.identical),
            "extractable": [{"file": e.file, "changes": e.changes} for e in self.extractable],
            "needs_review": list(self.needs_review),
            "errors": [{"file": f, "error": e} for f, e in self.errors],
        }


@dataclass
class ExtractionReport:
    """Outcome of ``Migrator.extract``.

    ``created`` and ``existing`` hold project-relative override paths;
    ``unchanged`` and ``errors`` name the target files.
    """

    strategy: str
    created: List[ExtractableFile] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)
    backup: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "created": [{"file": e.file, "changes": e.changes} for e in self.created],
            "unchanged": list(self.unchanged),
            "skipped_existing": list(self.existing),
            "errors": [{"file": f, "error": e} for f, e in self.errors],
            "backup": self.backup,
        }


def override_path_for(target: Path) -> Path:
    return Path(target).with_name(override_name_for(Path(target).name))


def write_override(path: Path, content: ConfigValue) -> None:
    fmt = detect_format(path)
    if fmt is Format.TOML and not isinstance(content, dict):
        fmt = Format.TEXT
    write_text(path, stringify(content, fmt))


class Migrator:
    def __init__(
        self,
        project_root: Path,
        *,
        config: Optional[Dict[str, Any]] = None,
        resolver: Optional[TemplateVariableResolver] = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        if config is None:
            config = get_cached_config(repo_root=self.project_root, validate=True)
        self.layout = LayoutConfig(self.project_root, config=config)
        self.settings = MigrateConfig(self.project_root, config=config)
        self.templates = TemplateDiscovery(self.project_root, layout=self.layout, resolver=resolver)
        self.extractor = DiffExtractor()
        self.backups = BackupManager(self.project_root, self.settings.backup_root(self.project_root))

    def _existing_targets(self) -> List[Tuple[Source, Path, str]]:
        found: List[Tuple[Source, Path, str]] = []
        for template in self.templates.discover():
            relative = template.relative_path or ""
            target = self.project_root / relative
            if target.is_file():
                found.append((template, target, relative))
        return found

    def load_current(self, target: Path) -> ConfigValue:
        """Parse the on-disk target; unparseable structured files are compared as text."""
        text = target.read_text(encoding="utf-8")
        fmt = detect_format(target)
        try:
            return strip_header(parse(text, fmt, lenient=fmt is Format.JSON))
        except CodecError:
            return text

    def analyze(self) -> MigrationAnalysis:
        analysis = MigrationAnalysis()
        threshold = self.settings.review_threshold
        for template, target, relative in self._existing_targets():
            try:
                current = self.load_current(target)
            except OSError as exc:
                logger.error("Error analyzing %s: %s", relative, exc)
                analysis.errors.append((relative, str(exc)))
                continue
            result = self.extractor.analyze(template.content, current)
            if result.identical:
                analysis.identical.append(relative)
            elif result.change_count > threshold:
                analysis.needs_review.append(relative)
            else:
                analysis.extractable.append(ExtractableFile(relative, result.change_count))
        return analysis

    def extract(
        self,
        strategy: Union[str, ExtractionStrategy, None] = None,
        *,
        force: bool = False,
        backup: bool = True,
    ) -> ExtractionReport:
        chosen = ExtractionStrategy.parse(strategy or self.settings.default_strategy)
        report = ExtractionReport(strategy=chosen.value)
        targets = self._existing_targets()

        if backup and targets:
            files = [target for _, target, _ in targets]
            if force:
                files.extend(p for p in (override_path_for(t) for t in files) if p.is_file())
            manifest = self.backups.create_backup(files)
            report.backup = manifest.timestamp
            self.backups.cleanup(self.settings.backup_retention)

        for template, target, relative in targets:
            try:
                current = self.load_current(target)
                diff = self.extractor.extract(template.content, current, chosen)
                if not has_content(diff.content):
                    report.unchanged.append(relative)
                    continue
                override = override_path_for(target)
                override_rel = override.relative_to(self.project_root).as_posix()
                if override.exists() and not force:
                    logger.warning("Skipped %s (override exists, use --force to overwrite)", relative)
                    report.existing.append(override_rel)
                    continue
                write_override(override, diff.content)
                report.created.append(ExtractableFile(override_rel, diff.changes))
                logger.info("Created %s (%d changes)", override_rel, diff.changes)
            except OSError as exc:
                logger.error("Error extracting %s: %s", relative, exc)
                report.errors.append((relative, str(exc)))
        return report


__all__ = [
    "ExtractableFile",
    "ExtractionReport",
    "MigrationAnalysis",
    "Migrator",
    "override_path_for",
    "write_override",
]
