"""Migration tooling: diff extraction, backups and override bootstrapping."""
from __future__ import annotations

from .backup import BackupManager, BackupManifest, RestoreReport
from .diff import DiffExtractor, ExtractionStrategy, count_changes, deep_equal, preserve_all_diff, smart_diff
from .migrator import ExtractionReport, MigrationAnalysis, Migrator

__all__ = [
    "BackupManager",
    "BackupManifest",
    "RestoreReport",
    "DiffExtractor",
    "ExtractionStrategy",
    "count_changes",
    "deep_equal",
    "preserve_all_diff",
    "smart_diff",
    "ExtractionReport",
    "MigrationAnalysis",
    "Migrator",
]
