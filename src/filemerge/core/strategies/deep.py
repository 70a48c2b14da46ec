"""Structural deep merge for JSON, YAML and TOML trees.

Two policies are available through ``MergeMode``:

``overlay`` (default)
    Arrays from later sources replace earlier arrays; a ``null`` value
    removes the key unconditionally.

``accumulate``
    Arrays are concatenated, dropping items already present (primitives by
    value, objects and arrays by identity); a ``null`` value may only remove a
    key that is absent or already null. Removing a key that holds content
    raises ``MergeConflictError`` whatever the content's type.

In both modes nested objects merge key by key and any other value from a
later source replaces the earlier one.
"""
from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, List, Sequence, Union

from ..exceptions import MergeConflictError
from ..types import ConfigValue, MergeContext, ValidationResult, as_mapping, is_mapping, type_name
from .base import MergeStrategy

_UNSET = object()


class MergeMode(str, Enum):
    OVERLAY = "overlay"
    ACCUMULATE = "accumulate"

    @classmethod
    def coerce(cls, value: Union[str, "MergeMode", None]) -> "MergeMode":
        if value is None:
            return cls.OVERLAY
        return value if isinstance(value, MergeMode) else cls(str(value))


def loose_equal(a: Any, b: Any) -> bool:
    """Primitive equality by value (booleans never equal numbers), containers by identity."""
    if isinstance(a, (dict, list)) or isinstance(b, (dict, list)):
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


def loose_contains(items: Sequence[Any], value: Any) -> bool:
    return any(loose_equal(item, value) for item in items)


def append_unique(existing: Sequence[Any], incoming: Sequence[Any]) -> List[Any]:
    """``existing`` followed by the items of ``incoming`` it does not already contain."""
    result = list(existing)
    for item in incoming:
        if not loose_contains(result, item):
            result.append(item)
    return result


def drop_key(result: Dict[str, Any], key: str, mode: MergeMode, path: str = "") -> None:
    """Apply a ``null`` for ``key`` to ``result`` under the ``mode`` deletion policy.

    Raises:
        MergeConflictError: In accumulate mode, when ``key`` holds content.
    """
    existing = result.get(key)
    if mode is MergeMode.ACCUMULATE and existing is not None:
        raise MergeConflictError(key, path=path, context={"existing_type": type_name(existing)})
    result.pop(key, None)


def merge_objects(
    base: Dict[str, Any],
    override: Dict[str, Any],
    mode: MergeMode = MergeMode.OVERLAY,
    path: str = "",
) -> Dict[str, Any]:
    """Merge ``override`` into a shallow copy of ``base``.

    Nested values are shared with the inputs until the caller deep-copies the
    final result; neither input is modified.

    Raises:
        MergeConflictError: In accumulate mode, when ``null`` targets a key with content.
    """
    result: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if value is None:
            drop_key(result, key, mode, path)
            continue
        existing = result.get(key, _UNSET)
        child_path = f"{path}.{key}" if path else str(key)
        if is_mapping(value):
            nested = existing if is_mapping(existing) else {}
            result[key] = merge_objects(nested, value, mode, child_path)
        elif isinstance(value, list):
            if mode is MergeMode.ACCUMULATE and isinstance(existing, list):
                result[key] = append_unique(existing, value)
            else:
                result[key] = list(value)
        else:
            result[key] = value
    return result


def deep_merge_all(
    contents: Sequence[ConfigValue],
    mode: MergeMode = MergeMode.OVERLAY,
) -> ConfigValue:
    """Fold ``contents`` left to right and return an independent copy.

    A non-object content replaces whatever came before it. Empty documents
    (``None``, e.g. a comment-only YAML file) contribute nothing.
    """
    acc: Any = _UNSET
    for content in contents:
        if content is None:
            continue
        if is_mapping(content):
            base = acc if is_mapping(acc) else {}
            acc = merge_objects(base, content, mode)  # type: ignore[arg-type]
        else:
            acc = content
    if acc is _UNSET:
        return {}
    return copy.deepcopy(acc)


class DeepMergeStrategy(MergeStrategy):
    name = "deep-merge"

    def __init__(self, mode: Union[str, MergeMode, None] = MergeMode.OVERLAY) -> None:
        self.mode = MergeMode.coerce(mode)

    def validate(self, content: ConfigValue) -> ValidationResult:
        if content is None:
            return ValidationResult.ok()
        try:
            as_mapping(content, f"{self.name}: content")
        except TypeError as exc:
            return ValidationResult.failed(str(exc))
        return ValidationResult.ok()

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        return deep_merge_all(contents, self.mode)


class YamlMergeStrategy(DeepMergeStrategy):
    name = "yaml-merge"


class TomlMergeStrategy(DeepMergeStrategy):
    name = "toml-merge"


__all__ = [
    "MergeMode",
    "loose_equal",
    "loose_contains",
    "append_unique",
    "drop_key",
    "merge_objects",
    "deep_merge_all",
    "DeepMergeStrategy",
    "YamlMergeStrategy",
    "TomlMergeStrategy",
]
