"""Override discovery.

Overrides are project-local files named ``<base>.overrides.<ext>`` (or
``<name>.overrides`` for extension-less files such as ``.gitignore``). They
carry no metadata and always merge last. A leading ``"//"`` key in a JSON
override is a comment and is dropped.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional

from ..codecs import Format, detect_format, parse, strip_header
from ..exceptions import CodecError
from ..types import OVERRIDE_PRIORITY, Source, SourceKind
from ..utils.globs import walk_files
from .base import SourceDiscovery

logger = logging.getLogger(__name__)

OVERRIDE_INFIX = ".overrides"
_OVERRIDE_NAME = re.compile(r"^(?P<base>.+)\.overrides(?P<ext>\.[^.]+)?$")


def override_target_name(name: str) -> Optional[str]:
    """Target file name for an override file name, or None if it is not one.

    Example:
        >>> override_target_name("tsconfig.overrides.json")
        'tsconfig.json'
        >>> override_target_name(".gitignore.overrides")
        '.gitignore'
    """
    match = _OVERRIDE_NAME.match(name)
    if match is None:
        return None
    return match.group("base") + (match.group("ext") or "")


def override_name_for(target_name: str) -> str:
    """Override file name for a target file name (inverse of ``override_target_name``)."""
    path = Path(target_name)
    if path.suffix and path.stem:
        return f"{path.stem}{OVERRIDE_INFIX}{path.suffix}"
    return f"{target_name}{OVERRIDE_INFIX}"


class OverrideDiscovery(SourceDiscovery):
    kind = SourceKind.OVERRIDE

    def _candidates(self) -> List[Path]:
        include = [self.layout.override_glob, f"**/*{OVERRIDE_INFIX}"]
        ignore = [*self.layout.ignore_globs, *self.layout.override_ignore_globs]
        return walk_files(self.project_root, include=include, ignore=ignore)

    def target_relative(self, path: Path) -> str:
        rel = Path(path).relative_to(self.project_root)
        name = override_target_name(rel.name) or rel.name
        return rel.with_name(name).as_posix()

    def target_path(self, path: Path) -> Path:
        return self.project_root / self.target_relative(path)

    def discover(self) -> List[Source]:
        self.skipped = []
        overrides: List[Source] = []
        for path in self._candidates():
            if override_target_name(path.name) is None:
                continue
            try:
                text = self.fs.read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                self._skip(path, f"unreadable ({exc})")
                continue
            fmt = detect_format(path)
            try:
                content = parse(text, fmt, lenient=fmt is Format.JSON)
            except CodecError as exc:
                self._skip(path, str(exc))
                continue
            overrides.append(
                Source(
                    kind=SourceKind.OVERRIDE,
                    location=path,
                    content=strip_header(content),
                    priority=OVERRIDE_PRIORITY,
                    relative_path=self.target_relative(path),
                )
            )
        logger.debug("Discovered %d overrides", len(overrides))
        return overrides


__all__ = ["OverrideDiscovery", "override_target_name", "override_name_for", "OVERRIDE_INFIX"]
