"""Resolution of ``{{NAME}}`` placeholders in paths and file bodies.

Resolution is all-or-nothing: either every placeholder is substituted or a
``MissingVariablesError`` names every undefined variable.
"""
from __future__ import annotations

import os
import re
from typing import Iterable, List, Mapping, Optional

from .exceptions import MissingVariablesError

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


class TemplateVariableResolver:
    """Substitute placeholders from an environment mapping (``os.environ`` by default)."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        # Read lazily so a resolver built before monkeypatching still sees the live env.
        return os.environ if self._environ is None else self._environ

    def has_variables(self, text: str) -> bool:
        return PLACEHOLDER_PATTERN.search(text) is not None

    def extract_variables(self, text: str) -> List[str]:
        """Placeholder names in first-occurrence order, without duplicates."""
        names: List[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(text):
            if match.group(1) not in names:
                names.append(match.group(1))
        return names

    def resolve(self, text: str) -> str:
        """Return ``text`` with every placeholder substituted.

        Raises:
            MissingVariablesError: If any referenced variable is undefined.
        """
        env = self.environ
        missing = [name for name in self.extract_variables(text) if name not in env]
        if missing:
            raise MissingVariablesError(missing, template=text)
        return PLACEHOLDER_PATTERN.sub(lambda m: env[m.group(1)], text)

    def resolve_all(self, texts: Iterable[str]) -> List[str]:
        return [self.resolve(t) for t in texts]


__all__ = ["PLACEHOLDER_PATTERN", "TemplateVariableResolver"]
