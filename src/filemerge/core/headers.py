"""Provenance headers for generated files.

JSON has no comment syntax, so JSON object targets carry the header as a
leading ``"//"`` key. YAML, TOML and text targets get a ``#`` banner and
JavaScript/TypeScript targets a ``/** */`` block.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Sequence

from .codecs import HEADER_KEY, Format, strip_header, stringify
from .discovery.overrides import override_name_for
from .types import ConfigValue, is_mapping
from .utils.templates import render_data_template

JS_SUFFIXES = (".js", ".mjs", ".cjs", ".ts", ".mts", ".cts")


def override_hint(relative_path: str) -> str:
    """Project-relative override path for a target."""
    rel = Path(relative_path)
    return rel.with_name(override_name_for(rel.name)).as_posix()


class HeaderRenderer:
    """Render merged content to text, prefixed with a provenance header."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def _context(self, relative_path: str, strategy: str, sources: Sequence[str]) -> Dict[str, Any]:
        return {
            "strategy": strategy,
            "sources": list(sources),
            "override_hint": override_hint(relative_path),
        }

    def render(
        self,
        relative_path: str,
        fmt: Format,
        content: ConfigValue,
        *,
        strategy: str,
        sources: Sequence[str],
    ) -> str:
        if isinstance(content, str) and fmt.is_structured:
            body = content
        else:
            body = stringify(content, fmt)

        if not self.enabled:
            return body

        context = self._context(relative_path, strategy, sources)
        if fmt is Format.JSON:
            if not is_mapping(content):
                return body
            header = render_data_template("header.json.j2", **context).strip()
            return stringify({HEADER_KEY: header, **strip_header(content)}, fmt)
        if relative_path.lower().endswith(JS_SUFFIXES):
            return render_data_template("header.jsdoc.j2", **context) + "\n" + body
        return render_data_template("header.hash.j2", **context) + "\n" + body


__all__ = ["HEADER_KEY", "JS_SUFFIXES", "HeaderRenderer", "override_hint", "strip_header"]
