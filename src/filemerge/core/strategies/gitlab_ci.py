"""GitLab CI (``.gitlab-ci.yml``) merge strategy.

Sources are either a *master template*, holding the pipeline's global
configuration, or job fragments. Only master templates contribute global
keys. Jobs from fragment files are namespaced by the fragment's directory so
two packages can both define ``test``::

    packages/api/ci.fragment.yaml   test  ->  api:test
"""
from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from ..types import ConfigValue, MergeContext, SourceKind, is_mapping
from .base import ObjectMergeStrategy
from .deep import append_unique

logger = logging.getLogger(__name__)

GLOBAL_KEYS = frozenset(
    {
        "stages",
        "variables",
        "image",
        "services",
        "before_script",
        "after_script",
        "cache",
        "default",
        "workflow",
        "include",
    }
)
MASTER_TEMPLATE_THRESHOLD = 3
_STRIPPED_PREFIXES = ("packages:", "modules:")


def is_master_template(content: Any) -> bool:
    """True when ``content`` declares at least three global pipeline keys."""
    if not is_mapping(content):
        return False
    return sum(1 for key in content if key in GLOBAL_KEYS) >= MASTER_TEMPLATE_THRESHOLD


def job_prefix(relative_dir: str) -> Optional[str]:
    """Job-name prefix for a fragment directory relative to the project root.

    Example:
        >>> job_prefix("packages/api")
        'api'
        >>> job_prefix("apps/web/ci")
        'apps:web:ci'
        >>> job_prefix(".") is None
        True
    """
    if relative_dir in ("", "."):
        return None
    prefix = relative_dir.replace("\\", ":").replace("/", ":")
    for stripped in _STRIPPED_PREFIXES:
        if prefix.startswith(stripped):
            prefix = prefix[len(stripped):]
            break
    return prefix or None


def _relative_dir(source_path: Path, project_root: Optional[Path]) -> str:
    if project_root is None:
        return "."
    try:
        rel = Path(os.path.abspath(source_path)).relative_to(os.path.abspath(project_root))
    except ValueError:
        return "."
    return rel.parent.as_posix()


class GitLabCIMergeStrategy(ObjectMergeStrategy):
    name = "gitlab-ci"
    list_keys = ("stages",)
    object_keys = ("variables",)

    def _merge_globals(self, result: Dict[str, Any], source: Mapping[str, Any]) -> None:
        for key, value in source.items():
            if key not in GLOBAL_KEYS:
                continue
            current = result.get(key)
            if key == "stages" and isinstance(value, list):
                result["stages"] = append_unique(current if isinstance(current, list) else [], value)
            elif key == "variables" and is_mapping(value):
                result["variables"] = {**(current if is_mapping(current) else {}), **value}
            elif isinstance(value, list) and isinstance(current, list):
                result[key] = append_unique(current, value)
            elif is_mapping(value) and is_mapping(current):
                result[key] = {**current, **value}
            else:
                result[key] = value

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        result: Dict[str, Any] = {"stages": [], "variables": {}}
        for index, source in enumerate(contents):
            if source is None:
                continue
            if not is_mapping(source):
                logger.warning("%s: ignoring non-object source for %s", self.name, context.relative_path)
                continue
            master = is_master_template(source)
            if master:
                self._merge_globals(result, source)

            prefix = None
            kind = context.source_kinds[index] if index < len(context.source_kinds) else None
            if not master and kind is SourceKind.FRAGMENT and index < len(context.source_paths):
                prefix = job_prefix(_relative_dir(context.source_paths[index], context.project_root))

            for key, value in source.items():
                if key in GLOBAL_KEYS:
                    continue
                result[f"{prefix}:{key}" if prefix else key] = value
        return copy.deepcopy(result)

    def post_process(self, result: ConfigValue, context: MergeContext) -> ConfigValue:
        if not is_mapping(result) or not is_mapping(result.get("variables")):
            return result
        processed = dict(result)
        processed["variables"] = dict(sorted(result["variables"].items(), key=lambda kv: str(kv[0])))
        return processed


__all__ = [
    "GLOBAL_KEYS",
    "MASTER_TEMPLATE_THRESHOLD",
    "GitLabCIMergeStrategy",
    "is_master_template",
    "job_prefix",
]
