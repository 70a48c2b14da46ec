"""Docker Compose merge strategy."""
from __future__ import annotations

import copy
from typing import Any, Dict, Sequence, Union

from ..types import ConfigValue, MergeContext, is_mapping
from .base import ObjectMergeStrategy
from .deep import MergeMode, drop_key, merge_objects

DEFAULT_COMPOSE_VERSION = "3.8"


class DockerComposeMergeStrategy(ObjectMergeStrategy):
    """Merge compose files service by service.

    - ``version``: the first source declaring one wins, else ``3.8``
    - ``services``: each service is deep-merged by name
    - ``volumes`` / ``networks``: shallow, last source wins per entry
    - any other top-level key: last source wins

    A ``null`` for ``services``, ``volumes`` or ``networks`` removes the
    section, following ``mode``'s deletion policy.
    """

    name = "docker-compose"
    object_keys = ("services", "volumes", "networks")

    def __init__(self, mode: Union[str, MergeMode, None] = MergeMode.OVERLAY) -> None:
        self.mode = MergeMode.coerce(mode)

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        result: Dict[str, Any] = {"version": None}
        for source in self._objects(contents, context):
            for key, value in source.items():
                if key == "version":
                    if result["version"] is None and value is not None:
                        result["version"] = value
                elif value is None and key in self.object_keys:
                    drop_key(result, key, self.mode)
                elif key == "services" and is_mapping(value):
                    current = result.get("services")
                    base = current if is_mapping(current) else {}
                    result["services"] = merge_objects(base, value, self.mode, "services")
                elif key in ("volumes", "networks") and is_mapping(value):
                    merged = dict(result.get(key) or {})
                    merged.update(value)
                    result[key] = merged
                else:
                    result[key] = value
        if result["version"] is None:
            result["version"] = DEFAULT_COMPOSE_VERSION
        return copy.deepcopy(result)


__all__ = ["DockerComposeMergeStrategy", "DEFAULT_COMPOSE_VERSION"]
