"""Timestamped backups of managed files.

Each backup is a directory ``<backup_dir>/<timestamp>/`` holding copies of the
files (at their project-relative paths) and a ``manifest.json`` recording the
SHA-256 of every copy.
"""
from __future__ import annotations

import hashlib
import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import BackupError
from ..utils.io import ensure_directory, read_json, write_json_atomic

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


def hash_file(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def make_timestamp(now: Optional[datetime] = None) -> str:
    """Filesystem-safe UTC timestamp, e.g. ``2024-05-01T12-30-00``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H-%M-%S")


@dataclass
class BackupEntry:
    original: str
    backup: str
    hash: str

    def to_dict(self) -> Dict[str, str]:
        return {"original": self.original, "backup": self.backup, "hash": self.hash}


@dataclass
class BackupManifest:
    timestamp: str
    files: List[BackupEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "files": [f.to_dict() for f in self.files]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupManifest":
        try:
            return cls(
                timestamp=str(data["timestamp"]),
                files=[BackupEntry(**entry) for entry in data.get("files", [])],
            )
        except (KeyError, TypeError) as exc:
            raise BackupError(f"Malformed backup manifest: {exc}") from exc


@dataclass
class RestoreReport:
    timestamp: str
    restored: List[str] = field(default_factory=list)
    hash_mismatches: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "restored": list(self.restored),
            "hash_mismatches": list(self.hash_mismatches),
            "failed": list(self.failed),
        }


class BackupManager:
    def __init__(self, project_root: Path, backup_root: Path) -> None:
        self.project_root = Path(project_root)
        self.backup_root = Path(backup_root)

    def _relative(self, path: Path) -> str:
        try:
            return Path(os.path.abspath(path)).relative_to(os.path.abspath(self.project_root)).as_posix()
        except ValueError:
            raise BackupError(f"Cannot back up a file outside the project: {path}") from None

    def _new_backup_dir(self, now: Optional[datetime] = None) -> Path:
        base = make_timestamp(now)
        candidate, suffix = base, 1
        while (self.backup_root / candidate).exists():
            candidate = f"{base}-{suffix}"
            suffix += 1
        return ensure_directory(self.backup_root / candidate)

    def create_backup(self, files: Iterable[Path], *, now: Optional[datetime] = None) -> BackupManifest:
        """Copy ``files`` into a new timestamped backup. Missing files are skipped."""
        backup_dir = self._new_backup_dir(now)
        manifest = BackupManifest(timestamp=backup_dir.name)
        for file in files:
            path = Path(file)
            if not path.is_file():
                logger.info("Skipped %s (does not exist)", path)
                continue
            rel = self._relative(path)
            destination = backup_dir / rel
            ensure_directory(destination.parent)
            shutil.copyfile(path, destination)
            manifest.files.append(BackupEntry(original=rel, backup=rel, hash=hash_file(destination)))
            logger.info("Backed up %s", rel)

        write_json_atomic(backup_dir / MANIFEST_NAME, manifest.to_dict())
        logger.info("Backup %s written (%d files)", manifest.timestamp, len(manifest.files))
        return manifest

    def load_manifest(self, timestamp: str) -> BackupManifest:
        path = self.backup_root / timestamp / MANIFEST_NAME
        try:
            data = read_json(path)
        except FileNotFoundError:
            raise BackupError(f"Backup not found: {timestamp}", context={"timestamp": timestamp}) from None
        except ValueError as exc:
            raise BackupError(f"Unreadable backup manifest {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise BackupError(f"Malformed backup manifest: {path}")
        return BackupManifest.from_dict(data)

    def restore(self, timestamp: str) -> RestoreReport:
        """Copy every file of backup ``timestamp`` back into the project.

        A copy whose hash no longer matches the manifest is restored anyway
        and reported in ``hash_mismatches``.
        """
        manifest = self.load_manifest(timestamp)
        backup_dir = self.backup_root / timestamp
        report = RestoreReport(timestamp=timestamp)
        for entry in manifest.files:
            source = backup_dir / entry.backup
            target = self.project_root / entry.original
            try:
                if hash_file(source) != entry.hash:
                    logger.warning("Hash mismatch for %s, restoring anyway", source)
                    report.hash_mismatches.append(entry.original)
                if target.is_symlink():
                    target.unlink()
                ensure_directory(target.parent)
                shutil.copyfile(source, target)
                report.restored.append(entry.original)
            except OSError as exc:
                logger.error("Failed to restore %s: %s", entry.original, exc)
                report.failed.append(entry.original)
        return report

    def list_backups(self) -> List[str]:
        """Backup timestamps, newest first."""
        if not self.backup_root.is_dir():
            return []
        return sorted((p.name for p in self.backup_root.iterdir() if p.is_dir()), reverse=True)

    def cleanup(self, retention: int) -> List[str]:
        """Delete all but the ``retention`` newest backups; return the removed ones."""
        removed: List[str] = []
        for name in self.list_backups()[max(retention, 0):]:
            try:
                shutil.rmtree(self.backup_root / name)
                removed.append(name)
            except OSError as exc:
                logger.error("Failed to remove backup %s: %s", name, exc)
        return removed


__all__ = [
    "MANIFEST_NAME",
    "BackupEntry",
    "BackupManifest",
    "BackupManager",
    "RestoreReport",
    "hash_file",
    "make_timestamp",
]
