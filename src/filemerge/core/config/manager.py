"""
filemerge configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import jsonschema
import yaml

from filemerge.core.exceptions import ConfigError
from filemerge.core.utils.io import iter_yaml_files, read_yaml
from filemerge.core.utils.merge import deep_merge
from filemerge.core.utils.paths import get_project_config_dir
from filemerge.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "FILEMERGE_"

# Variables that are not configuration paths.
_RESERVED_ENV_KEYS = {"FILEMERGE_PROJECT_ROOT"}


class ConfigManager:
    """Load, merge, and validate filemerge configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: FILEMERGE_<section>__<key>
    2. Project config: <project>/.filemerge/config/*.yaml (alphabetical order)
    3. Bundled defaults: filemerge.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        if repo_root is None:
            from filemerge.core.utils.paths import resolve_project_root

            repo_root = resolve_project_root()
        self.repo_root = Path(repo_root)
        self.core_config_dir = get_data_path("config")
        self.project_config_dir = get_project_config_dir(self.repo_root) / "config"
        self.schema_path = get_data_path("schemas", "config.schema.yaml")

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = read_yaml(path, default={}, raise_on_error=True)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"file": str(path)}) from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}", context={"file": str(path)})
        return data

    def _load_directory(self, directory: Path, cfg: Dict[str, Any]) -> Dict[str, Any]:
        for path in iter_yaml_files(directory):
            cfg = deep_merge(cfg, self.load_yaml(path))
        return cfg

    # ========== Environment overrides ==========

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[str]:
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            raise ConfigError(f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'")
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV_KEYS:
                continue
            raw = key[len(ENV_PREFIX):]
            if "__" not in raw:
                # Single-segment variables are not config paths.
                continue
            yield self._parse_env_key(raw), self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Union[Dict[str, Any], Any] = root
        for part in path[:-1]:
            if not isinstance(cur, dict):
                raise ConfigError(f"Environment override path traverses a non-mapping: {'.'.join(path)}")
            lower_map = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            use_key = lower_map.get(part, part)
            if use_key not in cur or not isinstance(cur[use_key], dict):
                cur[use_key] = {}
            cur = cur[use_key]
        lower_map = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
        cur[lower_map.get(path[-1], path[-1])] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self._iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ========== Loading ==========

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = read_yaml(self.schema_path, default={}, raise_on_error=True)
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
            )
            raise ConfigError(f"Invalid filemerge configuration: {details}")

    def _load_config_uncached(self, validate: bool = True) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {}
        cfg = self._load_directory(self.core_config_dir, cfg)
        if self.project_config_dir.exists():
            cfg = self._load_directory(self.project_config_dir, cfg)
        self.apply_env_overrides(cfg)
        if validate:
            self.validate_schema(cfg)
        return cfg

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Load configuration using the centralized cache.

        Returned dict should be treated as immutable.
        """
        from .cache import get_cached_config

        return get_cached_config(repo_root=self.repo_root, validate=validate)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key (e.g. ``merge.mode``)."""
        current: Any = self.load_config(validate=False)
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current


__all__ = ["ConfigManager", "ENV_PREFIX"]
