"""Active-module resolution.

A module ``<name>`` is active when ``<modules_dir>/<name>`` is a symlink whose
target, resolved relative to ``<modules_dir>``, is exactly
``<framework_modules_dir>/<name>``. Fragments living under the framework
module tree are only used while their module is active.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, List, Mapping, Optional

from .config.domains import ConditionsConfig, LayoutConfig
from .fs import FileSystem, LocalFileSystem
from .types import Source

logger = logging.getLogger(__name__)

# sys.platform values carrying a version suffix
_PLATFORM_PREFIXES = ("freebsd", "openbsd", "netbsd", "sunos", "aix")


def normalize_platform(name: str) -> str:
    """Map a platform identifier onto its stable family name."""
    low = name.strip().lower()
    for prefix in _PLATFORM_PREFIXES:
        if low.startswith(prefix):
            return prefix
    if low == "cygwin":
        return "win32"
    return low


class ActiveModuleCache:
    """Read-through cache for the active module set.

    The set is computed on first access and kept until ``invalidate()``.
    """

    def __init__(self, loader: Callable[[], FrozenSet[str]]) -> None:
        self._loader = loader
        self._value: Optional[FrozenSet[str]] = None

    def get(self) -> FrozenSet[str]:
        if self._value is None:
            self._value = self._loader()
        return self._value

    def invalidate(self) -> None:
        self._value = None

    @property
    def is_loaded(self) -> bool:
        return self._value is not None


class ActiveModuleResolver:
    def __init__(
        self,
        project_root: Path,
        *,
        layout: Optional[LayoutConfig] = None,
        conditions: Optional[ConditionsConfig] = None,
        fs: Optional[FileSystem] = None,
        environ: Optional[Mapping[str, str]] = None,
        platform: Optional[str] = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.layout = layout or LayoutConfig(repo_root=self.project_root)
        self.conditions = conditions or ConditionsConfig(repo_root=self.project_root)
        self.fs: FileSystem = fs or LocalFileSystem()
        self._environ = environ
        self.platform = normalize_platform(platform or sys.platform)
        self.modules_root = self.layout.modules_root(self.project_root)
        self.framework_modules_root = self.layout.framework_modules_root(self.project_root)
        self.cache = ActiveModuleCache(self._scan_active_modules)

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    @property
    def current_env(self) -> str:
        return self.conditions.current_env(self.environ)

    # ---------- activation ----------

    def is_module_active(self, name: str) -> bool:
        link = self.modules_root / name
        try:
            if not self.fs.exists(link) or not self.fs.is_symlink(link):
                return False
            link_target = self.fs.readlink(link)
        except OSError as exc:
            logger.debug("Cannot inspect module link %s: %s", link, exc)
            return False
        resolved = os.path.normpath(os.path.join(os.path.abspath(self.modules_root), link_target))
        expected = os.path.normpath(os.path.abspath(self.framework_modules_root / name))
        # A dangling link does not activate its module.
        return resolved == expected and self.fs.exists(Path(expected))

    def _scan_active_modules(self) -> FrozenSet[str]:
        if not self.fs.is_dir(self.modules_root):
            return frozenset()
        names = [
            entry.name
            for entry in self.fs.iterdir(self.modules_root)
            if self.fs.is_symlink(entry)
        ]
        active = frozenset(name for name in names if self.is_module_active(name))
        logger.debug("Active modules: %s", ", ".join(sorted(active)) or "<none>")
        return active

    def get_active_modules(self) -> FrozenSet[str]:
        return self.cache.get()

    def invalidate(self) -> None:
        self.cache.invalidate()

    # ---------- fragment filtering ----------

    def module_name_for(self, path: Path) -> Optional[str]:
        """Name of the framework module owning ``path``, if any.

        The first segment below the framework module root names the module, so a
        file placed directly in that root is keyed by its own file name.
        """
        try:
            rel = Path(os.path.abspath(path)).relative_to(os.path.abspath(self.framework_modules_root))
        except ValueError:
            return None
        return rel.parts[0] if rel.parts else None

    def filter_fragments(self, fragments: Iterable[Source]) -> List[Source]:
        kept: List[Source] = []
        for fragment in fragments:
            module = self.module_name_for(fragment.location)
            if module is None:
                kept.append(fragment)
                continue
            if fragment.metadata is not None and fragment.metadata.active_only is False:
                kept.append(fragment)
                continue
            if self.is_module_active(module):
                kept.append(fragment)
            else:
                logger.debug("Skipping %s: module '%s' is not active", fragment.location, module)
        return kept

    def check_conditions(self, fragment: Source) -> bool:
        conditions = fragment.metadata.conditions if fragment.metadata else None
        if conditions is None:
            return True
        if conditions.active_modules:
            active = self.get_active_modules()
            if not all(name in active for name in conditions.active_modules):
                return False
        if conditions.env is not None and conditions.env != self.current_env:
            return False
        if conditions.platform is not None and normalize_platform(conditions.platform) != self.platform:
            return False
        return True

    def filter_fragments_with_conditions(self, fragments: Iterable[Source]) -> List[Source]:
        return [f for f in self.filter_fragments(fragments) if self.check_conditions(f)]


__all__ = ["ActiveModuleCache", "ActiveModuleResolver", "normalize_platform"]
