"""Shared data model for configuration sources and merge results.

``ConfigValue`` is the closed set of values a parsed configuration file can
produce: mappings, lists and JSON scalars. Strategies receive ``ConfigValue``
trees and narrow them with the ``as_*`` helpers at their boundaries.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

ConfigValue = Union[Dict[str, Any], List[Any], str, int, float, bool, None]

TEMPLATE_PRIORITY = 0
DEFAULT_FRAGMENT_PRIORITY = 100
OVERRIDE_PRIORITY = 1000


def is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


def type_name(value: Any) -> str:
    """JSON kind of ``value`` (``object``, ``array``, ``string``, ...)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def as_mapping(value: Any, what: str = "content") -> Dict[str, Any]:
    """Narrow ``value`` to an object or raise ``TypeError``."""
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type_name(value)}")
    return value


def as_list(value: Any, what: str = "content") -> List[Any]:
    if not isinstance(value, list):
        raise TypeError(f"{what} must be an array, got {type_name(value)}")
    return value


def as_text(value: Any, what: str = "content") -> str:
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, got {type_name(value)}")
    return value


class SourceKind(str, Enum):
    TEMPLATE = "template"
    FRAGMENT = "fragment"
    OVERRIDE = "override"


@dataclass(frozen=True)
class FragmentConditions:
    """Activation conditions declared by a fragment (all must hold)."""

    active_modules: Tuple[str, ...] = ()
    env: Optional[str] = None
    platform: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.active_modules and self.env is None and self.platform is None


@dataclass(frozen=True)
class FragmentMetadata:
    """Declarative metadata extracted from a fragment file.

    Attributes:
        target_paths: One or more project-relative target paths (never empty)
        merge_strategy: Explicit strategy name, overriding auto-detection
        priority: Merge order; lower merges first
        conditions: Optional activation conditions
        copy: Copy the fragment instead of linking it when it is the only source
        active_only: Module fragments are only used while their module is active
    """

    target_paths: Tuple[str, ...]
    merge_strategy: Optional[str] = None
    priority: int = DEFAULT_FRAGMENT_PRIORITY
    conditions: Optional[FragmentConditions] = None
    copy: bool = False
    active_only: bool = True


@dataclass(frozen=True)
class Source:
    """A discovered configuration contributor."""

    kind: SourceKind
    location: Path
    content: ConfigValue
    priority: int
    metadata: Optional[FragmentMetadata] = None
    relative_path: Optional[str] = None

    @property
    def copy_instead_of_link(self) -> bool:
        return bool(self.metadata and self.metadata.copy)

    @property
    def merge_strategy(self) -> Optional[str]:
        return self.metadata.merge_strategy if self.metadata else None

    def describe(self, project_root: Path) -> str:
        """Location relative to ``project_root`` when possible."""
        try:
            return self.location.relative_to(project_root).as_posix()
        except ValueError:
            return str(self.location)


@dataclass
class TargetGroup:
    """All sources producing one target file, in ascending priority order."""

    target: Path
    relative_path: str
    sources: List[Source] = field(default_factory=list)

    def add(self, source: Source) -> None:
        self.sources.append(source)

    def sort(self) -> None:
        # list.sort is stable: equal priorities keep discovery order
        self.sources.sort(key=lambda s: s.priority)

    @property
    def explicit_strategy(self) -> Optional[str]:
        for source in self.sources:
            if source.merge_strategy:
                return source.merge_strategy
        return None


@dataclass(frozen=True)
class MergeContext:
    """Information handed to a strategy alongside the ordered contents."""

    target_path: Path
    relative_path: str
    source_paths: Tuple[Path, ...] = ()
    source_kinds: Tuple[SourceKind, ...] = ()
    active_modules: FrozenSet[str] = frozenset()
    project_root: Optional[Path] = None

    @classmethod
    def for_group(
        cls,
        group: TargetGroup,
        *,
        project_root: Path,
        active_modules: FrozenSet[str] = frozenset(),
    ) -> "MergeContext":
        return cls(
            target_path=group.target,
            relative_path=group.relative_path,
            source_paths=tuple(s.location for s in group.sources),
            source_kinds=tuple(s.kind for s in group.sources),
            active_modules=frozenset(active_modules),
            project_root=Path(project_root),
        )


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, *errors: str) -> "ValidationResult":
        return cls(valid=False, errors=list(errors))


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ConfigIssue:
    """One validation finding."""

    severity: Severity
    code: str
    message: str
    file: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if self.file:
            data["file"] = self.file
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


@dataclass
class ExtractedDiff:
    """Override content extracted from a concrete file."""

    content: ConfigValue
    strategy: str
    changes: int
    extracted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_empty(self) -> bool:
        return self.content is None


@dataclass
class DiffAnalysis:
    """Top-level comparison of a template and a concrete file."""

    identical: bool
    added_keys: List[str] = field(default_factory=list)
    modified_keys: List[str] = field(default_factory=list)
    deleted_keys: List[str] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.added_keys) + len(self.modified_keys) + len(self.deleted_keys)

    def to_dict(self) -> Mapping[str, Any]:
        return {
            "identical": self.identical,
            "added_keys": list(self.added_keys),
            "modified_keys": list(self.modified_keys),
            "deleted_keys": list(self.deleted_keys),
        }


__all__ = [
    "ConfigValue",
    "TEMPLATE_PRIORITY",
    "DEFAULT_FRAGMENT_PRIORITY",
    "OVERRIDE_PRIORITY",
    "is_mapping",
    "type_name",
    "as_mapping",
    "as_list",
    "as_text",
    "SourceKind",
    "FragmentConditions",
    "FragmentMetadata",
    "Source",
    "TargetGroup",
    "MergeContext",
    "ValidationResult",
    "Severity",
    "ConfigIssue",
    "ExtractedDiff",
    "DiffAnalysis",
]
