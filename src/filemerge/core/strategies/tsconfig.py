"""TypeScript ``tsconfig*.json`` merge strategy."""
from __future__ import annotations

import copy
from typing import Any, Dict, Sequence, Union

from ..types import ConfigValue, MergeContext, is_mapping
from .base import ObjectMergeStrategy
from .deep import MergeMode, append_unique, drop_key, merge_objects

UNION_KEYS = ("include", "exclude", "files")


class TsConfigMergeStrategy(ObjectMergeStrategy):
    """``compilerOptions`` deep-merged, path lists unioned, everything else last-wins.

    A ``null`` for ``compilerOptions`` or a path list removes the section,
    following ``mode``'s deletion policy.
    """

    name = "tsconfig"
    list_keys = UNION_KEYS
    object_keys = ("compilerOptions",)

    def __init__(self, mode: Union[str, MergeMode, None] = MergeMode.OVERLAY) -> None:
        self.mode = MergeMode.coerce(mode)

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        result: Dict[str, Any] = {}
        for source in self._objects(contents, context):
            for key, value in source.items():
                if value is None and key in self.object_keys + UNION_KEYS:
                    drop_key(result, key, self.mode)
                elif key == "compilerOptions" and is_mapping(value):
                    current = result.get(key)
                    base = current if is_mapping(current) else {}
                    result[key] = merge_objects(base, value, self.mode, key)
                elif key in UNION_KEYS and isinstance(value, list):
                    current = result.get(key)
                    result[key] = append_unique(current if isinstance(current, list) else [], value)
                else:
                    result[key] = value
        return copy.deepcopy(result)


__all__ = ["TsConfigMergeStrategy", "UNION_KEYS"]
