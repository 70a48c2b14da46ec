"""Template discovery.

Templates live under ``layout.templates_dir`` and are marked by a file name
prefix (``__`` by default): ``config-templates/apps/__tsconfig.json`` produces
``apps/tsconfig.json``. Templates whose path or body references an undefined
variable are skipped, since an override or fragment may still provide the
file.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import List

from ..codecs import Format, detect_format, parse
from ..exceptions import CodecError, MissingVariablesError
from ..types import TEMPLATE_PRIORITY, Source, SourceKind
from .base import SourceDiscovery

logger = logging.getLogger(__name__)


class TemplateDiscovery(SourceDiscovery):
    kind = SourceKind.TEMPLATE

    @property
    def templates_root(self) -> Path:
        return self.layout.templates_root(self.project_root)

    def _iter_template_files(self) -> List[Path]:
        prefix = self.layout.template_prefix
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.templates_root):
            dirnames.sort()
            for name in sorted(filenames):
                if name.startswith(prefix):
                    found.append(Path(dirpath) / name)
        return found

    def strip_prefix(self, relative: str) -> str:
        """Remove the template marker from the final path segment."""
        prefix = re.escape(self.layout.template_prefix)
        return re.sub(rf"(^|/){prefix}([^/]+)$", r"\1\2", relative)

    def target_relative(self, relative: str) -> str:
        return self.resolver.resolve(self.strip_prefix(relative))

    def target_path(self, relative: str) -> Path:
        """Absolute target for a template path relative to the templates root.

        Safe to call on an already-resolved, already-stripped path.
        """
        return self.project_root / self.target_relative(relative)

    def discover(self) -> List[Source]:
        self.skipped = []
        root = self.templates_root
        if not self.fs.is_dir(root):
            logger.warning("Templates directory not found: %s", root)
            return []

        templates: List[Source] = []
        for path in self._iter_template_files():
            relative = path.relative_to(root).as_posix()
            try:
                resolved_relative = self.resolver.resolve(relative)
            except MissingVariablesError as exc:
                self._skip(path, f"path variables not resolved ({exc})")
                continue

            try:
                raw = self.fs.read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                self._skip(path, f"unreadable ({exc})")
                continue

            try:
                body = self.resolver.resolve(raw)
            except MissingVariablesError as exc:
                self._skip(path, f"content has unresolved variables ({exc})")
                continue

            fmt = detect_format(path)
            try:
                content = parse(body, fmt, lenient=fmt is Format.JSON)
            except CodecError as exc:
                self._skip(path, str(exc))
                continue

            templates.append(
                Source(
                    kind=SourceKind.TEMPLATE,
                    location=path,
                    content=content,
                    priority=TEMPLATE_PRIORITY,
                    relative_path=self.target_relative(resolved_relative),
                )
            )

        logger.debug("Discovered %d templates under %s", len(templates), root)
        return templates


__all__ = ["TemplateDiscovery"]
