"""Fragment metadata extraction.

Structured fragments (JSON/YAML/TOML) declare metadata as ``_``-prefixed
top-level keys::

    {"_targetPath": "tsconfig.json", "_priority": 50, "compilerOptions": {...}}

Text fragments declare it as leading ``_key=value`` lines::

    _targetPath=.gitignore,.dockerignore
    _activeModules=auth
    node_modules/
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..exceptions import FragmentMetadataError
from ..types import DEFAULT_FRAGMENT_PRIORITY, FragmentConditions, FragmentMetadata

METADATA_PREFIX = "_"
TEXT_METADATA_LINE = re.compile(r"^_(\w+)=(.+)$")

# Boolean text metadata keys and their structured names.
_TEXT_FLAGS = {"copy": "_copy", "activeOnly": "_activeOnly"}
_TEXT_CONDITION_KEYS = {"activeModules", "env", "platform"}


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() == "true"


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def split_text_metadata(text: str) -> Tuple[Dict[str, Any], str]:
    """Separate leading ``_key=value`` lines from a text fragment.

    Returns the metadata in structured form (``_targetPath`` etc.) and the
    remaining body.
    """
    lines = text.split("\n")
    raw: Dict[str, Any] = {}
    conditions: Dict[str, Any] = {}
    body_start = 0
    for index, line in enumerate(lines):
        match = TEXT_METADATA_LINE.match(line.rstrip("\r"))
        if match is None:
            if line.strip() == "" and raw:
                body_start = index + 1
                continue
            break
        key, value = match.group(1), match.group(2).strip()
        body_start = index + 1
        if key == "targetPath":
            targets = _split_csv(value)
            raw["_targetPath"] = targets[0] if len(targets) == 1 else targets
        elif key == "priority":
            try:
                raw["_priority"] = int(value)
            except ValueError:
                raw["_priority"] = value
        elif key in _TEXT_FLAGS:
            raw[_TEXT_FLAGS[key]] = _as_bool(value)
        elif key == "mergeStrategy":
            raw["_mergeStrategy"] = value
        elif key == "activeModules":
            conditions["activeModules"] = _split_csv(value)
        elif key in _TEXT_CONDITION_KEYS:
            conditions[key] = value
    if conditions:
        raw["_conditions"] = conditions
    return raw, "\n".join(lines[body_start:])


def strip_metadata_keys(content: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of ``content`` without ``_``-prefixed top-level keys."""
    return {k: v for k, v in content.items() if not str(k).startswith(METADATA_PREFIX)}


def _parse_conditions(raw: Any) -> Optional[FragmentConditions]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise FragmentMetadataError("_conditions must be an object")
    modules = raw.get("activeModules", [])
    if isinstance(modules, str):
        modules = [modules]
    if not isinstance(modules, list) or not all(isinstance(m, str) for m in modules):
        raise FragmentMetadataError("_conditions.activeModules must be a list of strings")
    env = raw.get("env")
    platform = raw.get("platform")
    for name, value in (("env", env), ("platform", platform)):
        if value is not None and not isinstance(value, str):
            raise FragmentMetadataError(f"_conditions.{name} must be a string")
    conditions = FragmentConditions(active_modules=tuple(modules), env=env, platform=platform)
    return None if conditions.is_empty else conditions


def _parse_target_paths(raw: Any) -> Tuple[str, ...]:
    if raw is None:
        raise FragmentMetadataError("missing _targetPath", context={"field": "_targetPath"})
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list) or not all(isinstance(t, str) for t in raw):
        raise FragmentMetadataError(
            "_targetPath must be a string or a list of strings", context={"field": "_targetPath"}
        )
    targets = tuple(t.strip() for t in raw if t.strip())
    if not targets:
        raise FragmentMetadataError("_targetPath is empty", context={"field": "_targetPath"})
    return targets


def parse_metadata(raw: Mapping[str, Any]) -> FragmentMetadata:
    """Build ``FragmentMetadata`` from ``_``-prefixed keys.

    Raises:
        FragmentMetadataError: On a missing target path or a mistyped key.
    """
    targets = _parse_target_paths(raw.get("_targetPath"))

    strategy = raw.get("_mergeStrategy")
    if strategy is not None and not isinstance(strategy, str):
        raise FragmentMetadataError("_mergeStrategy must be a string")

    priority = raw.get("_priority", DEFAULT_FRAGMENT_PRIORITY)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise FragmentMetadataError("_priority must be an integer")

    flags: Dict[str, bool] = {}
    for key, default in (("_copy", False), ("_activeOnly", True)):
        value = raw.get(key, default)
        if not isinstance(value, bool):
            raise FragmentMetadataError(f"{key} must be a boolean")
        flags[key] = value

    return FragmentMetadata(
        target_paths=targets,
        merge_strategy=strategy or None,
        priority=priority,
        conditions=_parse_conditions(raw.get("_conditions")),
        copy=flags["_copy"],
        active_only=flags["_activeOnly"],
    )


__all__ = [
    "METADATA_PREFIX",
    "TEXT_METADATA_LINE",
    "split_text_metadata",
    "strip_metadata_keys",
    "parse_metadata",
]
