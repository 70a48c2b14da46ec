"""Base classes for merge strategies.

A strategy is a named, stateless function over the ordered contents of one
target group (lowest priority first). Strategies never mutate their inputs;
every result is a fresh tree.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

from ..types import ConfigValue, MergeContext, ValidationResult, as_mapping, is_mapping, type_name

logger = logging.getLogger(__name__)


class MergeStrategy(ABC):
    """Abstract base class for merge strategies."""

    name: str = ""

    def validate(self, content: ConfigValue) -> ValidationResult:
        """Check that ``content`` has the shape this strategy expects."""
        return ValidationResult.ok()

    @abstractmethod
    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        """Merge ``contents`` (ascending priority) into a new value."""
        ...

    def post_process(self, result: ConfigValue, context: MergeContext) -> ConfigValue:
        return result

    def run(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        """``merge`` followed by ``post_process``."""
        return self.post_process(self.merge(contents, context), context)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class ObjectMergeStrategy(MergeStrategy):
    """Strategy over object contents with optionally typed top-level keys."""

    list_keys: Tuple[str, ...] = ()
    object_keys: Tuple[str, ...] = ()

    def validate(self, content: ConfigValue) -> ValidationResult:
        if content is None:
            return ValidationResult.ok()
        try:
            obj = as_mapping(content, f"{self.name}: content")
        except TypeError as exc:
            return ValidationResult.failed(str(exc))
        errors: List[str] = []
        for key in self.list_keys:
            if key in obj and obj[key] is not None and not isinstance(obj[key], list):
                errors.append(f"{self.name}: '{key}' must be an array, got {type_name(obj[key])}")
        for key in self.object_keys:
            if key in obj and obj[key] is not None and not is_mapping(obj[key]):
                errors.append(f"{self.name}: '{key}' must be an object, got {type_name(obj[key])}")
        return ValidationResult(valid=not errors, errors=errors)

    def _objects(self, contents: Sequence[ConfigValue], context: MergeContext) -> List[Dict[str, Any]]:
        """Object contents in order; empty documents are dropped, anything else is logged and left out."""
        objects: List[Dict[str, Any]] = []
        for index, content in enumerate(contents):
            if content is None:
                continue
            try:
                objects.append(as_mapping(content))
            except TypeError:
                origin = context.source_paths[index] if index < len(context.source_paths) else index
                logger.warning(
                    "%s: ignoring %s source %s for %s",
                    self.name,
                    type_name(content),
                    origin,
                    context.relative_path,
                )
        return objects


__all__ = ["MergeStrategy", "ObjectMergeStrategy"]
