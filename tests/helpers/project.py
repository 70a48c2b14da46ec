"""Throwaway project trees for tests."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

TEMPLATES_DIR = "atom-framework/config-templates"
FRAMEWORK_MODULES_DIR = "atom-framework/modules"
MODULES_DIR = "modules"


class ProjectDir:
    """A project root under ``tmp_path`` with the default layout."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path(self, relative: str) -> Path:
        return self.root / relative

    def write(self, relative: str, content: str) -> Path:
        path = self.path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def write_json(self, relative: str, data: Any) -> Path:
        return self.write(relative, json.dumps(data, indent=2) + "\n")

    def write_yaml(self, relative: str, data: Any) -> Path:
        return self.write(relative, yaml.safe_dump(data, sort_keys=False))

    def template(self, target: str, content: Any) -> Path:
        """Write the template producing ``target`` (``dir/__name``)."""
        rel = Path(target)
        relative = (Path(TEMPLATES_DIR) / rel.parent / f"__{rel.name}").as_posix()
        return self._write_any(relative, content)

    def fragment(self, relative: str, content: Any) -> Path:
        return self._write_any(relative, content)

    def _write_any(self, relative: str, content: Any) -> Path:
        if isinstance(content, str):
            return self.write(relative, content)
        if relative.endswith((".yaml", ".yml")):
            return self.write_yaml(relative, content)
        return self.write_json(relative, content)

    def config(self, name: str, data: Dict[str, Any]) -> Path:
        """Write ``.filemerge/config/<name>.yaml``."""
        return self.write_yaml(f".filemerge/config/{name}.yaml", data)

    def activate_module(self, name: str, target: Optional[str] = None) -> Path:
        """Link ``modules/<name>`` to the framework module (or to ``target``)."""
        (self.root / FRAMEWORK_MODULES_DIR / name).mkdir(parents=True, exist_ok=True)
        link = self.root / MODULES_DIR / name
        link.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target or os.path.join("..", FRAMEWORK_MODULES_DIR, name), link)
        return link

    def read(self, relative: str) -> str:
        return self.path(relative).read_text(encoding="utf-8")

    def read_json(self, relative: str) -> Any:
        return json.loads(self.read(relative))

    def read_yaml(self, relative: str) -> Any:
        return yaml.safe_load(self.read(relative))


__all__ = ["ProjectDir", "TEMPLATES_DIR", "FRAMEWORK_MODULES_DIR", "MODULES_DIR"]
