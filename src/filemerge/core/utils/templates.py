"""Jinja2 rendering of the text templates bundled in ``filemerge.data``."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from filemerge.data import get_data_path


@lru_cache(maxsize=1)
def _environment() -> Environment:
    # Control blocks sit on their own lines; trimming keeps them from leaving blank lines.
    return Environment(
        loader=FileSystemLoader(str(get_data_path("templates"))),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )


def render_data_template(name: str, **context: Any) -> str:
    """Render ``data/templates/<name>`` with ``context``."""
    return _environment().get_template(name).render(**context)


__all__ = ["render_data_template"]
