"""Centralized configuration caching.

Loaded configuration is cached per project root. The cache key includes a
fingerprint of FILEMERGE_* environment variables and project config file
mtimes so long-running processes (watch mode, tests) never see stale config.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from filemerge.core.utils.io import iter_yaml_files
from filemerge.core.utils.paths import get_project_config_dir

_config_cache: Dict[str, Dict[str, Any]] = {}
_cache_clearers: Dict[str, Callable[[], None]] = {}


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        from filemerge.core.utils.paths import resolve_project_root

        return resolve_project_root()
    return Path(repo_root).expanduser().resolve()


def _fingerprint_dir(d: Path) -> List[Tuple[str, int, int]]:
    files: List[Tuple[str, int, int]] = []
    for p in iter_yaml_files(d):
        try:
            st = p.stat()
        except OSError:
            files.append((p.name, 0, 0))
            continue
        files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
    return files


def _cache_key(repo_root: Path, validate: bool) -> str:
    env_items = sorted(
        (k, os.environ.get(k, "")) for k in os.environ.keys() if k.startswith("FILEMERGE_")
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]
    cfg_dir = get_project_config_dir(repo_root) / "config"
    cfg_fp = hashlib.sha256(repr(_fingerprint_dir(cfg_dir)).encode("utf-8")).hexdigest()[:12]
    suffix = ":validated" if validate else ":raw"
    return f"{repo_root}{suffix}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None, validate: bool = False) -> Dict[str, Any]:
    """Get configuration with caching.

    Returns the same config dict instance for the same project root and
    fingerprint, avoiding repeated file I/O.
    """
    normalized_root = _normalize_repo_root(repo_root)
    key = _cache_key(normalized_root, validate)
    if key not in _config_cache:
        from .manager import ConfigManager

        manager = ConfigManager(repo_root=normalized_root)
        _config_cache[key] = manager._load_config_uncached(validate=validate)
    # NOTE: returns the cached dict instance (treat as immutable)
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear all configuration caches, including registered clearers."""
    _config_cache.clear()
    for clearer in list(_cache_clearers.values()):
        clearer()


def register_cache_clearer(name: str, clearer: Callable[[], None]) -> None:
    """Register an additional cache clearer to run inside ``clear_all_caches()``."""
    _cache_clearers[name] = clearer


def is_cached(repo_root: Optional[Path] = None) -> bool:
    """Check if config for ``repo_root`` is cached (either validation flavour)."""
    root = str(_normalize_repo_root(repo_root))
    return any(k.startswith(f"{root}:") for k in _config_cache)


__all__ = [
    "get_cached_config",
    "clear_all_caches",
    "register_cache_clearer",
    "is_cached",
]
