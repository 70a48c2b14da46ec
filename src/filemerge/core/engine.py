"""Source resolution engine.

``apply()`` runs one full pass:

1. Discover templates, fragments and overrides
2. Refresh the active module set and filter fragments
3. Group sources by absolute target path, ascending priority
4. For each group: link/copy a single source, or merge several and write
   the result atomically

Target groups are independent, so with ``merge.max_workers > 1`` they are
processed in a thread pool. A filesystem or merge failure on one target is
recorded in the report and does not stop the others.
"""
from __future__ import annotations

import concurrent.futures
import logging
import os
import posixpath
from dataclasses import dataclass, field, replace
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence

from .codecs import detect_format
from .config.cache import get_cached_config
from .config.domains import ConditionsConfig, LayoutConfig, MergeConfig
from .discovery import (
    DiscoveredSources,
    FragmentDiscovery,
    OverrideDiscovery,
    TemplateDiscovery,
)
from .exceptions import CodecError, MergeError, MergeValidationError
from .fs import FileSystem, LocalFileSystem
from .headers import HeaderRenderer
from .modules import ActiveModuleResolver
from .strategies import MergeStrategy, StrategyRegistry, default_registry
from .symlinks import SymlinkManager
from .types import MergeContext, Source, SourceKind, TargetGroup
from .variables import TemplateVariableResolver

logger = logging.getLogger(__name__)

ACTION_SYMLINK = "symlink"
ACTION_COPY = "copy"
ACTION_MERGE = "merge"
ACTION_REMOVE = "remove"
ACTION_UNCHANGED = "unchanged"


@dataclass
class TargetResult:
    relative_path: str
    action: str
    sources: List[str] = field(default_factory=list)
    strategy: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "target": self.relative_path,
            "action": self.action,
            "sources": list(self.sources),
        }
        if self.strategy:
            data["strategy"] = self.strategy
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data


@dataclass
class TargetFailure:
    relative_path: str
    error: Exception

    @property
    def message(self) -> str:
        return f"{self.relative_path}: {self.error}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.relative_path,
            "error": str(self.error),
            "type": type(self.error).__name__,
        }


@dataclass
class ApplyReport:
    results: List[TargetResult] = field(default_factory=list)
    failures: List[TargetFailure] = field(default_factory=list)
    active_modules: FrozenSet[str] = frozenset()
    templates: int = 0
    fragments: int = 0
    fragments_used: int = 0
    overrides: int = 0
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def first_error(self) -> Optional[Exception]:
        return self.failures[0].error if self.failures else None

    def count(self, action: str) -> int:
        return sum(1 for r in self.results if r.action == action)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "active_modules": sorted(self.active_modules),
            "discovered": {
                "templates": self.templates,
                "fragments": self.fragments,
                "fragments_used": self.fragments_used,
                "overrides": self.overrides,
            },
            "summary": {
                action: self.count(action)
                for action in (ACTION_SYMLINK, ACTION_COPY, ACTION_MERGE, ACTION_REMOVE, ACTION_UNCHANGED)
            },
            "results": [r.to_dict() for r in self.results],
            "failures": [f.to_dict() for f in self.failures],
        }


def normalize_target(relative: str) -> str:
    """Project-relative POSIX form of a declared target path."""
    cleaned = relative.replace("\\", "/").lstrip("/")
    return posixpath.normpath(cleaned) if cleaned else "."


class SourceResolutionEngine:
    def __init__(
        self,
        project_root: Path,
        *,
        config: Optional[Dict[str, Any]] = None,
        fs: Optional[FileSystem] = None,
        environ: Optional[Mapping[str, str]] = None,
        dry_run: bool = False,
        filters: Optional[Sequence[str]] = None,
        strict: Optional[bool] = None,
        registry: Optional[StrategyRegistry] = None,
        modules: Optional[ActiveModuleResolver] = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        if config is None:
            config = get_cached_config(repo_root=self.project_root, validate=True)
        self.config = config
        self.layout = LayoutConfig(self.project_root, config=config)
        self.merge_config = MergeConfig(self.project_root, config=config)
        self.conditions = ConditionsConfig(self.project_root, config=config)
        self.fs: FileSystem = fs or LocalFileSystem()
        self.dry_run = dry_run
        self.filters = [f for f in (filters or []) if f]
        self.strict = self.merge_config.strict_validation if strict is None else strict

        self.resolver = TemplateVariableResolver(environ)
        self.registry = registry or default_registry(self.merge_config.mode)
        self.modules = modules or ActiveModuleResolver(
            self.project_root,
            layout=self.layout,
            conditions=self.conditions,
            fs=self.fs,
            environ=environ,
        )
        common = {"layout": self.layout, "resolver": self.resolver, "fs": self.fs}
        self.templates = TemplateDiscovery(self.project_root, **common)
        self.fragments = FragmentDiscovery(self.project_root, **common)
        self.overrides = OverrideDiscovery(self.project_root, **common)
        self.links = SymlinkManager(self.fs)
        self.headers = HeaderRenderer(enabled=self.merge_config.headers)

    # ---------- discovery and grouping ----------

    def discover(self) -> DiscoveredSources:
        """Run all discoverers.

        Raises:
            MissingVariablesError: If a fragment target path cannot be resolved.
        """
        discovered = DiscoveredSources(
            templates=self.templates.discover(),
            fragments=self.fragments.discover(),
            overrides=self.overrides.discover(),
        )
        discovered.skipped = [*self.templates.skipped, *self.fragments.skipped, *self.overrides.skipped]
        logger.info(
            "Discovered %d templates, %d fragments, %d overrides",
            len(discovered.templates),
            len(discovered.fragments),
            len(discovered.overrides),
        )
        return discovered

    def _matches_filters(self, relative_path: str) -> bool:
        if not self.filters:
            return True
        return any(fnmatchcase(relative_path, pattern) for pattern in self.filters)

    def expand_fragments(self, fragments: Sequence[Source]) -> List[Source]:
        """One fragment ``Source`` per declared target path."""
        expanded: List[Source] = []
        for fragment in fragments:
            targets = fragment.metadata.target_paths if fragment.metadata else ()
            for target in targets:
                expanded.append(replace(fragment, relative_path=normalize_target(target)))
        return expanded

    def build_groups(self, discovered: DiscoveredSources) -> List[TargetGroup]:
        fragments = self.modules.filter_fragments_with_conditions(discovered.fragments)
        groups: Dict[str, TargetGroup] = {}
        for source in [*discovered.templates, *self.expand_fragments(fragments), *discovered.overrides]:
            relative = normalize_target(source.relative_path or "")
            target = os.path.normpath(self.project_root / relative)
            group = groups.get(target)
            if group is None:
                group = groups[target] = TargetGroup(target=Path(target), relative_path=relative)
            group.add(source)

        selected: List[TargetGroup] = []
        for key in sorted(groups, key=lambda k: groups[k].relative_path):
            group = groups[key]
            if not self._matches_filters(group.relative_path):
                continue
            group.sort()
            selected.append(group)
        return selected

    # ---------- per-target processing ----------

    def select_strategy(self, group: TargetGroup) -> MergeStrategy:
        return self.registry.select(group.explicit_strategy, group.relative_path)

    def _describe(self, group: TargetGroup) -> List[str]:
        return [s.describe(self.project_root) for s in group.sources]

    def validate_sources(self, strategy: MergeStrategy, group: TargetGroup) -> List[str]:
        """Strategy validation findings for every source of ``group``.

        Raises:
            MergeValidationError: In strict mode, when any source is invalid.
        """
        findings: List[str] = []
        for source in group.sources:
            result = strategy.validate(source.content)
            for message in result.errors:
                findings.append(f"{source.describe(self.project_root)}: {message}")
        for finding in findings:
            logger.warning("%s: %s", group.relative_path, finding)
        if findings and self.strict:
            raise MergeValidationError(
                f"{group.relative_path}: {len(findings)} source(s) failed {strategy.name} validation",
                context={"target": group.relative_path, "findings": findings},
            )
        return findings

    def merge_group(
        self,
        group: TargetGroup,
        active_modules: FrozenSet[str] = frozenset(),
    ) -> TargetResult:
        strategy = self.select_strategy(group)
        findings = self.validate_sources(strategy, group)
        context = MergeContext.for_group(group, project_root=self.project_root, active_modules=active_modules)
        merged = strategy.run([s.content for s in group.sources], context)
        fmt = detect_format(group.target)
        try:
            text = self.headers.render(
                group.relative_path,
                fmt,
                merged,
                strategy=strategy.name,
                sources=self._describe(group),
            )
        except (CodecError, TypeError, ValueError) as exc:
            raise MergeError(
                f"{group.relative_path}: cannot write merged content as {fmt.value}: {exc}",
                context={"target": group.relative_path, "strategy": strategy.name},
            ) from exc
        if not self.dry_run:
            if self.fs.is_symlink(group.target):
                # Writing through the link would overwrite its source.
                self.fs.unlink(group.target)
            self.fs.write_text(group.target, text)
        logger.info("Merged %s from %d sources (%s)", group.relative_path, len(group.sources), strategy.name)
        return TargetResult(
            relative_path=group.relative_path,
            action=ACTION_MERGE,
            sources=self._describe(group),
            strategy=strategy.name,
            warnings=findings,
            dry_run=self.dry_run,
        )

    def process(self, group: TargetGroup, active_modules: FrozenSet[str] = frozenset()) -> TargetResult:
        sources = self._describe(group)
        if not group.sources:
            if not self.dry_run:
                self.links.remove(group.target)
            return TargetResult(group.relative_path, ACTION_REMOVE, dry_run=self.dry_run)

        if len(group.sources) > 1:
            return self.merge_group(group, active_modules)

        source = group.sources[0]
        if source.copy_instead_of_link:
            if not self.dry_run:
                self.links.copy_file(source.location, group.target)
            logger.info("Copied %s from %s", group.relative_path, sources[0])
            return TargetResult(group.relative_path, ACTION_COPY, sources, dry_run=self.dry_run)

        if self.links.is_symlink_to(group.target, source.location):
            return TargetResult(group.relative_path, ACTION_UNCHANGED, sources, dry_run=self.dry_run)
        if not self.dry_run:
            self.links.create_symlink(source.location, group.target)
        logger.info("Linked %s -> %s", group.relative_path, sources[0])
        return TargetResult(group.relative_path, ACTION_SYMLINK, sources, dry_run=self.dry_run)

    def _process_safely(self, group: TargetGroup, active: FrozenSet[str], report: ApplyReport) -> None:
        try:
            report.results.append(self.process(group, active))
        except (OSError, MergeError) as exc:
            logger.error("Failed to process %s: %s", group.relative_path, exc)
            report.failures.append(TargetFailure(group.relative_path, exc))

    def apply(self) -> ApplyReport:
        """Discover, group and process every target.

        Raises:
            MissingVariablesError: If a fragment target path cannot be resolved.
        """
        discovered = self.discover()
        self.modules.invalidate()
        active = self.modules.get_active_modules()
        groups = self.build_groups(discovered)

        report = ApplyReport(
            active_modules=active,
            templates=len(discovered.templates),
            fragments=len(discovered.fragments),
            fragments_used=sum(1 for g in groups for s in g.sources if s.kind is SourceKind.FRAGMENT),
            overrides=len(discovered.overrides),
            dry_run=self.dry_run,
        )

        workers = self.merge_config.max_workers
        if workers > 1 and len(groups) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {executor.submit(self.process, group, active): group for group in groups}
                outcomes: Dict[str, Any] = {}
                for future in concurrent.futures.as_completed(futures):
                    group = futures[future]
                    try:
                        outcomes[group.relative_path] = future.result()
                    except (OSError, MergeError) as exc:
                        logger.error("Failed to process %s: %s", group.relative_path, exc)
                        outcomes[group.relative_path] = TargetFailure(group.relative_path, exc)
            # Report in group order regardless of completion order.
            for group in groups:
                outcome = outcomes[group.relative_path]
                if isinstance(outcome, TargetFailure):
                    report.failures.append(outcome)
                else:
                    report.results.append(outcome)
        else:
            for group in groups:
                self._process_safely(group, active, report)

        logger.info(
            "Processed %d targets (%d failed)%s",
            len(groups),
            len(report.failures),
            " [dry run]" if self.dry_run else "",
        )
        return report


__all__ = [
    "ACTION_SYMLINK",
    "ACTION_COPY",
    "ACTION_MERGE",
    "ACTION_REMOVE",
    "ACTION_UNCHANGED",
    "ApplyReport",
    "SourceResolutionEngine",
    "TargetFailure",
    "TargetResult",
    "normalize_target",
]
