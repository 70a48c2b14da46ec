"""Fragment discovery.

Fragments are partial contributions named ``*.fragment.<ext>`` found under the
configured ``layout.fragment_globs``. Each carries metadata naming one or more
target paths; fragments without valid metadata are skipped, but a target path
with an undefined variable aborts discovery.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..codecs import detect_format, parse
from ..exceptions import CodecError, FragmentMetadataError, MissingVariablesError
from ..types import Source, SourceKind
from ..utils.globs import walk_files
from .base import SourceDiscovery
from .metadata import parse_metadata, split_text_metadata, strip_metadata_keys

logger = logging.getLogger(__name__)


class FragmentDiscovery(SourceDiscovery):
    kind = SourceKind.FRAGMENT

    def _candidates(self) -> List[Path]:
        ignore = [*self.layout.ignore_globs, *self.layout.fragment_ignore_globs]
        return walk_files(self.project_root, include=self.layout.fragment_globs, ignore=ignore)

    def load(self, path: Path) -> Optional[Source]:
        """Load a single fragment, or return None when it must be skipped.

        Raises:
            MissingVariablesError: If a target path references an undefined variable.
        """
        try:
            text = self.fs.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            self._skip(path, f"unreadable ({exc})")
            return None

        fmt = detect_format(path)
        raw_meta: Dict[str, Any]
        content: Any
        if fmt.is_structured:
            try:
                parsed = parse(text, fmt)
            except CodecError as exc:
                self._skip(path, str(exc))
                return None
            if not isinstance(parsed, dict):
                self._skip(path, "fragment content must be an object")
                return None
            raw_meta = parsed
            content = strip_metadata_keys(parsed)
        else:
            raw_meta, content = split_text_metadata(text)

        try:
            metadata = parse_metadata(raw_meta)
        except FragmentMetadataError as exc:
            code = "MISSING_TARGET_PATH" if exc.context.get("field") == "_targetPath" else "INVALID_METADATA"
            self._skip(path, str(exc), code=code)
            return None

        try:
            targets = tuple(self.resolver.resolve_all(metadata.target_paths))
        except MissingVariablesError as exc:
            logger.error("Cannot resolve _targetPath of fragment %s: %s", self._rel(path), exc)
            raise MissingVariablesError(exc.missing, template=str(path)) from exc

        metadata = replace(metadata, target_paths=targets)
        return Source(
            kind=SourceKind.FRAGMENT,
            location=path,
            content=content,
            priority=metadata.priority,
            metadata=metadata,
        )

    def discover(self) -> List[Source]:
        self.skipped = []
        fragments: List[Source] = []
        for path in self._candidates():
            fragment = self.load(path)
            if fragment is not None:
                fragments.append(fragment)
        logger.debug("Discovered %d fragments", len(fragments))
        return fragments


__all__ = ["FragmentDiscovery"]
