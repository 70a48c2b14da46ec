"""In-memory ``FileSystem`` implementation.

Lets module activation and link handling be tested deterministically,
without creating real symlinks.
"""
from __future__ import annotations

import posixpath
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, Set, Union

PathLike = Union[str, Path]


def _key(path: PathLike) -> str:
    return posixpath.normpath(PurePosixPath(path).as_posix())


class FakeFileSystem:
    def __init__(self) -> None:
        self.files: Dict[str, str] = {}
        self.links: Dict[str, str] = {}
        self.dirs: Set[str] = {"/"}

    # ---------- setup helpers ----------

    def add_file(self, path: PathLike, content: str = "") -> None:
        self.mkdir(Path(_key(path)).parent)
        self.files[_key(path)] = content

    def add_link(self, link: PathLike, target: PathLike) -> None:
        self.mkdir(Path(_key(link)).parent)
        self.links[_key(link)] = PurePosixPath(target).as_posix()

    def _follow(self, path: PathLike) -> str:
        key = _key(path)
        for _ in range(32):
            if key not in self.links:
                return key
            key = _key(posixpath.join(posixpath.dirname(key), self.links[key]))
        raise OSError(f"Too many levels of symbolic links: {path}")

    # ---------- FileSystem protocol ----------

    def exists(self, path: PathLike) -> bool:
        key = _key(path)
        return key in self.files or key in self.links or key in self.dirs

    def is_symlink(self, path: PathLike) -> bool:
        return _key(path) in self.links

    def is_dir(self, path: PathLike) -> bool:
        return self._follow(path) in self.dirs

    def readlink(self, path: PathLike) -> Path:
        key = _key(path)
        if key not in self.links:
            raise OSError(f"Not a symlink: {path}")
        return Path(self.links[key])

    def read_text(self, path: PathLike) -> str:
        key = self._follow(path)
        if key not in self.files:
            raise FileNotFoundError(str(path))
        return self.files[key]

    def read_bytes(self, path: PathLike) -> bytes:
        return self.read_text(path).encode("utf-8")

    def write_text(self, path: PathLike, content: str) -> None:
        self.add_file(path, content)

    def copy_file(self, src: PathLike, dst: PathLike) -> None:
        self.add_file(dst, self.read_text(src))

    def symlink(self, target: PathLike, link: PathLike) -> None:
        if self.exists(link):
            raise FileExistsError(str(link))
        self.add_link(link, target)

    def unlink(self, path: PathLike) -> None:
        key = _key(path)
        if key in self.links:
            del self.links[key]
        elif key in self.files:
            del self.files[key]
        else:
            raise FileNotFoundError(str(path))

    def mkdir(self, path: PathLike) -> None:
        key = _key(path)
        while key not in self.dirs:
            self.dirs.add(key)
            key = posixpath.dirname(key)

    def iterdir(self, path: PathLike) -> Iterator[Path]:
        base = self._follow(path)
        children = {
            entry
            for entry in (*self.files, *self.links, *self.dirs)
            if entry != base and posixpath.dirname(entry) == base
        }
        return iter(Path(entry) for entry in sorted(children))

    def lstat_size(self, path: PathLike) -> int:
        key = _key(path)
        if key in self.links:
            return len(self.links[key])
        return len(self.files[key].encode("utf-8"))


__all__ = ["FakeFileSystem"]

