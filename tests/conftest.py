import logging
import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'filemerge' and tests/helpers as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from helpers.cache_utils import reset_filemerge_caches
from helpers.fake_fs import FakeFileSystem
from helpers.project import ProjectDir

# Variables from a developer shell must not leak into config or resolution.
_LEAK_PRONE_ENV_PREFIXES = ("FILEMERGE_",)
_LEAK_PRONE_ENV_KEYS = ("NODE_ENV", "EDITOR", "VISUAL")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure caches and filemerge env vars are fresh for each test."""
    for key in list(os.environ):
        if key.startswith(_LEAK_PRONE_ENV_PREFIXES) or key in _LEAK_PRONE_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
    reset_filemerge_caches()
    level = logging.getLogger().level
    yield
    # CLI runs call configure_logging(), which raises the root level.
    logging.getLogger().setLevel(level)
    reset_filemerge_caches()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ProjectDir:
    """
    Isolated project tree.

    The project root is pinned through FILEMERGE_PROJECT_ROOT and the test
    runs from inside it, so nothing resolves to the developer's checkout.
    """
    root = tmp_path / "project"
    (root / ".filemerge" / "config").mkdir(parents=True)
    monkeypatch.setenv("FILEMERGE_PROJECT_ROOT", str(root))
    monkeypatch.chdir(root)
    return ProjectDir(root.resolve())


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem()
