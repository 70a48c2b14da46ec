"""Adding files to, and removing them from, management; creating overrides.

``FileManager.add`` moves a hand-maintained file into the templates tree and
links (or copies) it back, so the next ``apply()`` owns it. ``remove`` is the
inverse. ``OverrideCreator`` writes the per-project override that turns a
linked target into a generated one.
"""
from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .codecs import HEADER_KEY, Format, detect_format, stringify
from .config.cache import get_cached_config
from .config.domains import LayoutConfig
from .discovery import TemplateDiscovery
from .engine import ApplyReport, SourceResolutionEngine, normalize_target
from .exceptions import ManagementError
from .migration.diff import DiffExtractor, ExtractionStrategy, has_content
from .migration.migrator import Migrator, override_path_for
from .symlinks import SymlinkManager
from .types import is_mapping
from .utils.io import read_text, write_text
from .utils.templates import render_data_template
from .variables import TemplateVariableResolver

logger = logging.getLogger(__name__)

GITIGNORE_SECTION = "# Config Manager - Generated Files"


def add_gitignore_entry(gitignore: Path, entry: str) -> bool:
    """Append ``entry`` under the generated-files section. False if already listed."""
    content = read_text(gitignore) if gitignore.exists() else ""
    if any(line.strip() == entry for line in content.splitlines()):
        return False
    if GITIGNORE_SECTION not in content:
        if content and not content.endswith("\n"):
            content += "\n"
        content += f"\n{GITIGNORE_SECTION}\n"
    content += f"{entry}\n"
    write_text(gitignore, content)
    return True


def remove_gitignore_entry(gitignore: Path, entry: str) -> bool:
    if not gitignore.exists():
        return False
    lines = read_text(gitignore).split("\n")
    kept = [line for line in lines if line.strip() != entry]
    if len(kept) == len(lines):
        return False
    write_text(gitignore, "\n".join(kept))
    return True


@dataclass
class ManagementResult:
    file: str
    template: Optional[str] = None
    override: Optional[str] = None
    linked: bool = False
    copied: bool = False
    gitignore_updated: bool = False
    removed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "template": self.template,
            "override": self.override,
            "linked": self.linked,
            "copied": self.copied,
            "gitignore_updated": self.gitignore_updated,
            "removed": list(self.removed),
        }


class _ManagedFiles:
    def __init__(self, project_root: Path, *, config: Optional[Dict[str, Any]] = None) -> None:
        self.project_root = Path(project_root).resolve()
        if config is None:
            config = get_cached_config(repo_root=self.project_root, validate=True)
        self.config = config
        self.layout = LayoutConfig(self.project_root, config=config)

    def relative(self, file: str) -> str:
        absolute = os.path.abspath(os.path.join(self.project_root, file))
        rel = os.path.relpath(absolute, self.project_root)
        if rel == os.curdir or rel.startswith(os.pardir):
            raise ManagementError(f"Path is outside the project: {file}", context={"file": file})
        return normalize_target(Path(rel).as_posix())

    def template_relative(self, relative: str) -> str:
        rel = Path(relative)
        return (Path(self.layout.templates_dir) / rel.parent / f"{self.layout.template_prefix}{rel.name}").as_posix()

    def _project_rel(self, path: Path) -> str:
        return path.relative_to(self.project_root).as_posix()


class FileManager(_ManagedFiles):
    def __init__(self, project_root: Path, *, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(project_root, config=config)
        self.links = SymlinkManager()
        self.gitignore = self.project_root / ".gitignore"

    def add(
        self,
        file: str,
        *,
        force: bool = False,
        no_symlink: bool = False,
        keep_original: bool = False,
    ) -> ManagementResult:
        """Move ``file`` into the templates tree and link or copy it back.

        Raises:
            ManagementError: If the file is missing, is already a link, or a
                template exists and ``force`` is not set.
        """
        relative = self.relative(file)
        target = self.project_root / relative
        template_rel = self.template_relative(relative)
        template = self.project_root / template_rel

        if target.is_symlink():
            raise ManagementError(f"File is already a link: {relative}", context={"file": relative})
        if not target.is_file():
            raise ManagementError(f"File not found: {relative}", context={"file": relative})
        if template.exists() and not force:
            raise ManagementError(
                f"File already managed: {template_rel} exists. Use --force to overwrite.",
                context={"file": relative, "template": template_rel},
            )

        original = target.read_bytes() if keep_original else None
        template.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(target), str(template))
        logger.info("Moved %s -> %s", relative, template_rel)

        result = ManagementResult(file=relative, template=template_rel)
        if no_symlink:
            self.links.copy_file(template, target)
            result.copied = True
        else:
            self.links.create_symlink(template, target)
            result.linked = True

        result.gitignore_updated = add_gitignore_entry(self.gitignore, relative)

        if original is not None:
            override = override_path_for(target)
            override.write_bytes(original)
            result.override = self._project_rel(override)
            logger.info("Kept original content as %s", result.override)
        return result

    def remove(self, file: str) -> ManagementResult:
        """Restore ``file`` as a regular file and drop its template and override.

        Raises:
            ManagementError: If ``file`` has no template.
        """
        relative = self.relative(file)
        target = self.project_root / relative
        template_rel = self.template_relative(relative)
        template = self.project_root / template_rel
        if not template.is_file():
            raise ManagementError(f"File not managed: {template_rel} not found", context={"file": relative})

        result = ManagementResult(file=relative, template=template_rel)
        self.links.copy_file(template, target)
        result.copied = True
        template.unlink()
        result.removed.append(template_rel)

        override = override_path_for(target)
        if override.is_file():
            override.unlink()
            result.override = self._project_rel(override)
            result.removed.append(result.override)

        result.gitignore_updated = remove_gitignore_entry(self.gitignore, relative)
        logger.info("Removed %s from management", relative)
        return result


@dataclass
class OverrideResult:
    file: str
    override: str
    extracted: bool
    content: str
    report: Optional[ApplyReport] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "override": self.override,
            "extracted": self.extracted,
            "content": self.content,
            "apply": self.report.to_dict() if self.report else None,
        }


class OverrideCreator(_ManagedFiles):
    SKELETONS = {
        Format.JSON: "override.json.j2",
        Format.YAML: "override.yaml.j2",
    }

    def __init__(
        self,
        project_root: Path,
        *,
        config: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(project_root, config=config)
        self.environ = environ
        self.resolver = TemplateVariableResolver(environ)
        self.templates = TemplateDiscovery(self.project_root, layout=self.layout, resolver=self.resolver)

    def skeleton(self, relative: str, template: Optional[str] = None) -> str:
        """Starter override body for ``relative``.

        ``template`` names the skeleton format (``json``, ``yaml`` or ``text``)
        and defaults to the target's own format.
        """
        fmt = Format(template) if template else detect_format(relative)
        name = self.SKELETONS.get(fmt, "override.text.j2")
        return render_data_template(name, basename=Path(relative).name)

    def extracted(self, relative: str) -> str:
        source = next((t for t in self.templates.discover() if t.relative_path == relative), None)
        if source is None:
            raise ManagementError(f"No template content for {relative}", context={"file": relative})
        migrator = Migrator(self.project_root, config=self.config, resolver=self.resolver)
        current = migrator.load_current(self.project_root / relative)
        diff = DiffExtractor().extract(source.content, current, ExtractionStrategy.SMART)
        if not has_content(diff.content):
            logger.info("%s matches its template; writing a skeleton instead", relative)
            return self.skeleton(relative)
        fmt = detect_format(relative)
        content = diff.content
        if fmt is Format.JSON and is_mapping(content):
            note = f"Extracted overrides for {Path(relative).name}. Edit these values as needed."
            return stringify({HEADER_KEY: note, **content}, fmt)
        if isinstance(content, str):
            return content
        if fmt is Format.TOML and not is_mapping(content):
            fmt = Format.TEXT
        return stringify(content, fmt if fmt.is_structured else Format.JSON)

    def create(
        self,
        file: str,
        *,
        extract_current: bool = False,
        template: Optional[str] = None,
        force: bool = False,
        apply: bool = True,
    ) -> OverrideResult:
        """Write the override for a managed ``file`` and re-apply.

        Raises:
            ManagementError: If ``file`` has no template, or the override
                exists and ``force`` is not set.
        """
        relative = self.relative(file)
        template_rel = self.template_relative(relative)
        if not (self.project_root / template_rel).is_file():
            raise ManagementError(
                f"File not managed: {relative}. No template at {template_rel}; "
                f"use 'filemerge add {relative}' first.",
                context={"file": relative, "template": template_rel},
            )

        target = self.project_root / relative
        override = override_path_for(target)
        override_rel = self._project_rel(override)
        if override.exists() and not force:
            raise ManagementError(
                f"Override already exists: {override_rel}. Use --force to overwrite.",
                context={"file": relative, "override": override_rel},
            )

        use_current = extract_current and target.exists()
        content = self.extracted(relative) if use_current else self.skeleton(relative, template)
        write_text(override, content)
        logger.info("Created %s", override_rel)

        result = OverrideResult(file=relative, override=override_rel, extracted=use_current, content=content)
        if apply:
            engine = SourceResolutionEngine(self.project_root, config=self.config, environ=self.environ)
            result.report = engine.apply()
        return result


def open_in_editor(path: Path, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Open ``path`` in ``$EDITOR`` (or ``$VISUAL``). False if it could not be started."""
    env = os.environ if environ is None else environ
    editor = env.get("EDITOR") or env.get("VISUAL")
    if not editor:
        logger.warning("Neither EDITOR nor VISUAL is set; open %s manually", path)
        return False
    try:
        subprocess.run([*shlex.split(editor), str(path)], check=False)
    except OSError as exc:
        logger.warning("Could not open editor %s: %s", editor, exc)
        return False
    return True


__all__ = [
    "FileManager",
    "GITIGNORE_SECTION",
    "ManagementResult",
    "OverrideCreator",
    "OverrideResult",
    "add_gitignore_entry",
    "open_in_editor",
    "remove_gitignore_entry",
]
