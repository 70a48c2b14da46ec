"""VS Code ``.vscode/tasks.json`` merge strategy."""
from __future__ import annotations

import copy
from typing import Any, Dict, List, Sequence

from ..types import ConfigValue, MergeContext, is_mapping
from .base import ObjectMergeStrategy

DEFAULT_TASKS_VERSION = "2.0.0"


def _sort_key(entry: Any, field: str) -> str:
    if is_mapping(entry):
        return str(entry.get(field) or "")
    return ""


class VSCodeTasksMergeStrategy(ObjectMergeStrategy):
    """Concatenate tasks, de-duplicate inputs by ``id``, sort both afterwards."""

    name = "vscode-tasks"
    list_keys = ("tasks", "inputs")
    object_keys = ("options",)

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        result: Dict[str, Any] = {"version": DEFAULT_TASKS_VERSION, "tasks": [], "inputs": []}
        tasks: List[Any] = result["tasks"]
        inputs: List[Any] = result["inputs"]
        seen_ids: List[Any] = []

        for source in self._objects(contents, context):
            for key, value in source.items():
                if key == "version":
                    if value:
                        result["version"] = value
                elif key == "tasks" and isinstance(value, list):
                    tasks.extend(dict(task) if is_mapping(task) else task for task in value)
                elif key == "inputs" and isinstance(value, list):
                    for entry in value:
                        entry_id = entry.get("id") if is_mapping(entry) else None
                        if entry_id in seen_ids:
                            continue
                        seen_ids.append(entry_id)
                        inputs.append(dict(entry) if is_mapping(entry) else entry)
                elif key == "options" and is_mapping(value):
                    options = dict(result.get("options") or {})
                    options.update(value)
                    result["options"] = options
                else:
                    result[key] = value
        return copy.deepcopy(result)

    def post_process(self, result: ConfigValue, context: MergeContext) -> ConfigValue:
        if not is_mapping(result):
            return result
        processed = dict(result)
        if isinstance(processed.get("tasks"), list):
            processed["tasks"] = sorted(processed["tasks"], key=lambda t: _sort_key(t, "label"))
        if isinstance(processed.get("inputs"), list):
            processed["inputs"] = sorted(processed["inputs"], key=lambda i: _sort_key(i, "id"))
        return processed


__all__ = ["VSCodeTasksMergeStrategy", "DEFAULT_TASKS_VERSION"]
