"""Override extraction: the part of a concrete file that differs from its template.

Merging the extracted diff back over the template (deep merge) reproduces the
concrete file's added and changed keys.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union

from ..types import ConfigValue, DiffAnalysis, ExtractedDiff, is_mapping


class ExtractionStrategy(str, Enum):
    SMART = "smart"
    MINIMAL = "minimal"
    PRESERVE_ALL = "preserve-all"

    @classmethod
    def parse(cls, value: Union[str, "ExtractionStrategy"]) -> "ExtractionStrategy":
        if isinstance(value, ExtractionStrategy):
            return value
        normalized = str(value).strip().lower()
        if normalized == "smart-extract":
            return cls.SMART
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown extraction strategy '{value}' (choose from {choices})") from None


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality where booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_mapping(a) and is_mapping(b):
        if len(a) != len(b):
            return False
        return all(key in b and deep_equal(a[key], b[key]) for key in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


def smart_diff(template: ConfigValue, current: ConfigValue) -> ConfigValue:
    """Keys of ``current`` that are new or differ from ``template``; None when equal.

    Example:
        >>> smart_diff({"a": 1, "b": {"c": 2}}, {"a": 1, "b": {"c": 3, "d": 4}})
        {'b': {'c': 3, 'd': 4}}
    """
    if not is_mapping(current):
        return None if deep_equal(template, current) else current
    if not is_mapping(template):
        return current

    diff: Dict[str, Any] = {}
    for key, value in current.items():
        if key not in template:
            diff[key] = value
            continue
        base = template[key]
        if is_mapping(value) and is_mapping(base):
            nested = smart_diff(base, value)
            if nested:
                diff[key] = nested
            continue
        if not deep_equal(base, value):
            diff[key] = value
    return diff or None


def preserve_all_diff(template: ConfigValue, current: ConfigValue) -> ConfigValue:
    """Keys of ``current`` missing from ``template``, at every depth.

    Values of keys the template already declares are not compared, so the
    result stays valid if the template later changes them.
    """
    if not is_mapping(current) or not is_mapping(template):
        return current

    diff: Dict[str, Any] = {}
    for key, value in current.items():
        if key not in template:
            diff[key] = value
        elif is_mapping(value) and is_mapping(template[key]):
            nested = preserve_all_diff(template[key], value)
            if nested:
                diff[key] = nested
    return diff


def count_changes(diff: ConfigValue) -> int:
    """Number of keys in ``diff``, counting nested object keys too."""
    if not is_mapping(diff):
        return 0
    total = 0
    for value in diff.values():
        total += 1
        if is_mapping(value):
            total += count_changes(value)
    return total


class DiffExtractor:
    def extract(
        self,
        template: ConfigValue,
        current: ConfigValue,
        strategy: Union[str, ExtractionStrategy] = ExtractionStrategy.SMART,
    ) -> ExtractedDiff:
        chosen = ExtractionStrategy.parse(strategy)
        if chosen is ExtractionStrategy.PRESERVE_ALL:
            content = preserve_all_diff(template, current)
        else:
            # minimal and smart currently produce the same diff
            content = smart_diff(template, current)
        return ExtractedDiff(content=content, strategy=chosen.value, changes=count_changes(content))

    def analyze(self, template: ConfigValue, current: ConfigValue) -> DiffAnalysis:
        """Top-level added/modified/deleted keys."""
        if not is_mapping(template) or not is_mapping(current):
            return DiffAnalysis(identical=deep_equal(template, current))
        added = [key for key in current if key not in template]
        modified = [key for key in current if key in template and not deep_equal(template[key], current[key])]
        deleted = [key for key in template if key not in current]
        return DiffAnalysis(
            identical=not (added or modified or deleted),
            added_keys=added,
            modified_keys=modified,
            deleted_keys=deleted,
        )


def has_content(diff: Optional[ConfigValue]) -> bool:
    if diff is None:
        return False
    if isinstance(diff, (dict, list, str)):
        return len(diff) > 0
    return True


__all__ = [
    "ExtractionStrategy",
    "DiffExtractor",
    "deep_equal",
    "smart_diff",
    "preserve_all_diff",
    "count_changes",
    "has_content",
]
