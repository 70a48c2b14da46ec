"""``pnpm-workspace.yaml`` merge strategy."""
from __future__ import annotations

import copy
from typing import Any, Dict, Sequence, Union

from ..types import ConfigValue, MergeContext, is_mapping
from .base import ObjectMergeStrategy
from .deep import MergeMode, append_unique, drop_key, merge_objects


class PnpmWorkspaceMergeStrategy(ObjectMergeStrategy):
    """``packages`` unioned, ``catalogs`` deep-merged, other keys last-wins.

    A ``null`` for either section removes it, following ``mode``'s deletion policy.
    """

    name = "pnpm-workspace"
    list_keys = ("packages",)
    object_keys = ("catalogs",)

    def __init__(self, mode: Union[str, MergeMode, None] = MergeMode.OVERLAY) -> None:
        self.mode = MergeMode.coerce(mode)

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        result: Dict[str, Any] = {}
        for source in self._objects(contents, context):
            for key, value in source.items():
                if value is None and key in self.list_keys + self.object_keys:
                    drop_key(result, key, self.mode)
                elif key == "packages" and isinstance(value, list):
                    current = result.get(key)
                    result[key] = append_unique(current if isinstance(current, list) else [], value)
                elif key == "catalogs" and is_mapping(value):
                    current = result.get(key)
                    base = current if is_mapping(current) else {}
                    result[key] = merge_objects(base, value, self.mode, key)
                else:
                    result[key] = value
        return copy.deepcopy(result)


__all__ = ["PnpmWorkspaceMergeStrategy"]
