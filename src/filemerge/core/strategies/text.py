"""Strategies for plain-text targets."""
from __future__ import annotations

import copy
from typing import List, Sequence, Set

from ..types import ConfigValue, MergeContext, ValidationResult, as_text
from .base import MergeStrategy


class AppendLinesStrategy(MergeStrategy):
    """Union of non-blank lines in first-seen order (ignore files and similar).

    Example:
        ``["a\\nb\\n", "b\\nc\\n"]`` merges to ``"a\\nb\\nc\\n"``.
    """

    name = "append-lines"

    def validate(self, content: ConfigValue) -> ValidationResult:
        try:
            as_text(content, f"{self.name}: content")
        except TypeError as exc:
            return ValidationResult.failed(str(exc))
        return ValidationResult.ok()

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        lines: List[str] = []
        seen: Set[str] = set()
        for content in contents:
            text = content if isinstance(content, str) else str(content)
            for line in text.split("\n"):
                if line.strip() == "" or line in seen:
                    continue
                seen.add(line)
                lines.append(line)
        return "\n".join(lines) + "\n"


class ReplaceStrategy(MergeStrategy):
    """Highest-priority source wins verbatim."""

    name = "replace"

    def merge(self, contents: Sequence[ConfigValue], context: MergeContext) -> ConfigValue:
        if not contents:
            return None
        return copy.deepcopy(contents[-1])


__all__ = ["AppendLinesStrategy", "ReplaceStrategy"]
