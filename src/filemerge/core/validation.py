"""Configuration validation.

Runs discovery without writing anything and aggregates findings by severity:
errors make ``validate`` fail, warnings fail it only in strict mode.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .discovery import DiscoveredSources, SkippedSource
from .engine import SourceResolutionEngine
from .exceptions import FileMergeError
from .types import ConfigIssue, Severity, Source

logger = logging.getLogger(__name__)

_SKIP_SEVERITY = {
    "MISSING_TARGET_PATH": Severity.ERROR,
    "INVALID_METADATA": Severity.WARNING,
}


@dataclass
class ValidationReport:
    issues: List[ConfigIssue] = field(default_factory=list)
    templates: int = 0
    fragments: int = 0
    overrides: int = 0
    active_modules: List[str] = field(default_factory=list)

    def add(self, issue: ConfigIssue) -> None:
        self.issues.append(issue)

    def by_severity(self) -> Dict[Severity, List[ConfigIssue]]:
        buckets: Dict[Severity, List[ConfigIssue]] = {s: [] for s in Severity}
        for issue in self.issues:
            buckets[issue.severity].append(issue)
        return buckets

    @property
    def valid(self) -> bool:
        return not any(i.severity is Severity.ERROR for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity is Severity.WARNING for i in self.issues)

    def exit_code(self, strict: bool = False) -> int:
        if not self.valid or (strict and self.has_warnings):
            return 1
        return 0

    def to_dict(self) -> Dict[str, Any]:
        buckets = self.by_severity()
        return {
            "valid": self.valid,
            "summary": {s.value: len(items) for s, items in buckets.items()},
            "discovered": {
                "templates": self.templates,
                "fragments": self.fragments,
                "overrides": self.overrides,
            },
            "active_modules": list(self.active_modules),
            "issues": [i.to_dict() for i in self.issues],
        }


class Validator:
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

    def _rel(self, path: Path) -> str:
        try:
            return Path(path).relative_to(self.project_root).as_posix()
        except ValueError:
            return str(path)

    def _skipped(self, report: ValidationReport, skipped: List[SkippedSource]) -> None:
        for item in skipped:
            report.add(
                ConfigIssue(
                    severity=_SKIP_SEVERITY.get(item.code, Severity.INFO),
                    code=item.code,
                    message=f"Skipped {item.kind.value}: {item.reason}",
                    file=self._rel(item.location),
                )
            )

    def _check_fragment(self, report: ValidationReport, fragment: Source, active: frozenset) -> None:
        metadata = fragment.metadata
        if metadata is None:
            return
        file = self._rel(fragment.location)
        registry = self.engine.registry
        if metadata.merge_strategy and metadata.merge_strategy not in registry:
            report.add(
                ConfigIssue(
                    severity=Severity.WARNING,
                    code="UNKNOWN_STRATEGY",
                    message=f"Unknown merge strategy: {metadata.merge_strategy}",
                    file=file,
                    suggestion=f"Use one of: {', '.join(registry.names())}",
                )
            )
        if metadata.conditions:
            for module in metadata.conditions.active_modules:
                if module not in active:
                    report.add(
                        ConfigIssue(
                            severity=Severity.WARNING,
                            code="INACTIVE_DEPENDENCY",
                            message=f"Fragment requires inactive module: {module}",
                            file=file,
                            suggestion="Activate the module or the fragment will be ignored",
                        )
                    )

    def _check_contents(self, report: ValidationReport, discovered: DiscoveredSources) -> None:
        for group in self.engine.build_groups(discovered):
            if len(group.sources) < 2:
                continue
            strategy = self.engine.select_strategy(group)
            for source in group.sources:
                result = strategy.validate(source.content)
                for message in result.errors:
                    report.add(
                        ConfigIssue(
                            severity=Severity.WARNING,
                            code="INVALID_CONTENT",
                            message=f"{group.relative_path}: {message}",
                            file=self._rel(source.location),
                        )
                    )

    def validate(self) -> ValidationReport:
        report = ValidationReport()
        discovered = DiscoveredSources()
        engine = self.engine

        try:
            discovered.templates = engine.templates.discover()
            report.templates = len(discovered.templates)
            self._skipped(report, engine.templates.skipped)
        except (OSError, FileMergeError) as exc:
            report.add(ConfigIssue(Severity.ERROR, "TEMPLATE_DISCOVERY_FAILED", f"Failed to discover templates: {exc}"))

        engine.modules.invalidate()
        active = engine.modules.get_active_modules()
        report.active_modules = sorted(active)

        try:
            discovered.fragments = engine.fragments.discover()
            report.fragments = len(discovered.fragments)
            self._skipped(report, engine.fragments.skipped)
            for fragment in discovered.fragments:
                self._check_fragment(report, fragment, active)
        except (OSError, FileMergeError) as exc:
            report.add(ConfigIssue(Severity.ERROR, "FRAGMENT_VALIDATION_FAILED", f"Failed to validate fragments: {exc}"))

        try:
            discovered.overrides = engine.overrides.discover()
            report.overrides = len(discovered.overrides)
            self._skipped(report, engine.overrides.skipped)
        except (OSError, FileMergeError) as exc:
            report.add(ConfigIssue(Severity.ERROR, "OVERRIDE_DISCOVERY_FAILED", f"Failed to discover overrides: {exc}"))

        self._check_contents(report, discovered)
        logger.info(
            "Validation finished: %d issues (%s)",
            len(report.issues),
            "valid" if report.valid else "invalid",
        )
        return report


__all__ = ["ValidationReport", "Validator"]
