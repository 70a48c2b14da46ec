"""Link and copy operations for single-source targets."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .fs import FileSystem, LocalFileSystem

logger = logging.getLogger(__name__)


class SymlinkManager:
    def __init__(self, fs: Optional[FileSystem] = None) -> None:
        self.fs: FileSystem = fs or LocalFileSystem()

    def _clear(self, target: Path) -> None:
        if not self.fs.exists(target):
            return
        if self.fs.is_dir(target) and not self.fs.is_symlink(target):
            raise IsADirectoryError(f"Refusing to replace directory: {target}")
        self.fs.unlink(target)

    def is_symlink_to(self, link: Path, source: Path) -> bool:
        """True if ``link`` is a symlink resolving to ``source``."""
        if not self.fs.is_symlink(link):
            return False
        resolved = os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(link)), self.fs.readlink(link)))
        return resolved == os.path.normpath(os.path.abspath(source))

    def create_symlink(self, source: Path, target: Path) -> bool:
        """Point ``target`` at ``source`` with a relative link.

        Returns False when the link was already correct.
        """
        source, target = Path(source), Path(target)
        if self.is_symlink_to(target, source):
            return False
        self._clear(target)
        self.fs.mkdir(target.parent)
        relative = os.path.relpath(os.path.abspath(source), os.path.dirname(os.path.abspath(target)))
        self.fs.symlink(Path(relative), target)
        logger.debug("Linked %s -> %s", target, relative)
        return True

    def copy_file(self, source: Path, target: Path) -> None:
        # An existing link must go first or the copy would overwrite its source.
        self._clear(Path(target))
        self.fs.copy_file(Path(source), Path(target))
        logger.debug("Copied %s -> %s", source, target)

    def remove(self, target: Path) -> bool:
        """Remove ``target``; a missing target is not an error."""
        if not self.fs.exists(Path(target)):
            return False
        self._clear(Path(target))
        return True


__all__ = ["SymlinkManager"]
