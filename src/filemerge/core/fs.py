"""Filesystem adapter used by discovery, module resolution and the engine.

Components accept any object implementing ``FileSystem``; production code uses
``LocalFileSystem`` and tests can substitute an in-memory fake.
"""
from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from filemerge.core.utils.io import ensure_directory
from filemerge.core.utils.io import write_text as _atomic_write_text


@runtime_checkable
class FileSystem(Protocol):
    def exists(self, path: Path) -> bool: ...

    def is_symlink(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def readlink(self, path: Path) -> Path: ...

    def read_text(self, path: Path) -> str: ...

    def read_bytes(self, path: Path) -> bytes: ...

    def write_text(self, path: Path, content: str) -> None: ...

    def copy_file(self, src: Path, dst: Path) -> None: ...

    def symlink(self, target: Path, link: Path) -> None: ...

    def unlink(self, path: Path) -> None: ...

    def mkdir(self, path: Path) -> None: ...

    def iterdir(self, path: Path) -> Iterator[Path]: ...

    def lstat_size(self, path: Path) -> int: ...


class LocalFileSystem:
    """``FileSystem`` over the real disk."""

    def exists(self, path: Path) -> bool:
        # Dangling symlinks still count as existing entries.
        return os.path.lexists(path)

    def is_symlink(self, path: Path) -> bool:
        return Path(path).is_symlink()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def readlink(self, path: Path) -> Path:
        return Path(os.readlink(path))

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write_text(self, path: Path, content: str) -> None:
        _atomic_write_text(Path(path), content)

    def copy_file(self, src: Path, dst: Path) -> None:
        ensure_directory(Path(dst).parent)
        shutil.copyfile(src, dst)

    def symlink(self, target: Path, link: Path) -> None:
        ensure_directory(Path(link).parent)
        os.symlink(target, link)

    def unlink(self, path: Path) -> None:
        Path(path).unlink()

    def mkdir(self, path: Path) -> None:
        ensure_directory(Path(path))

    def iterdir(self, path: Path) -> Iterator[Path]:
        return iter(sorted(Path(path).iterdir()))

    def lstat_size(self, path: Path) -> int:
        return os.lstat(path).st_size


__all__ = ["FileSystem", "LocalFileSystem"]
