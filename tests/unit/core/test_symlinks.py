from __future__ import annotations

import os
from pathlib import Path

import pytest

from filemerge.core.symlinks import SymlinkManager
from helpers.fake_fs import FakeFileSystem


def test_create_symlink_uses_relative_target(tmp_path: Path) -> None:
    source = tmp_path / "atom-framework/config-templates/apps/__tsconfig.json"
    source.parent.mkdir(parents=True)
    source.write_text("{}", encoding="utf-8")
    target = tmp_path / "apps/tsconfig.json"

    assert SymlinkManager().create_symlink(source, target) is True

    assert target.is_symlink()
    assert os.readlink(target) == "../atom-framework/config-templates/apps/__tsconfig.json"
    assert target.read_text(encoding="utf-8") == "{}"


def test_correct_link_is_left_alone(tmp_path: Path) -> None:
    source = tmp_path / "src.json"
    source.write_text("{}", encoding="utf-8")
    target = tmp_path / "out.json"
    manager = SymlinkManager()
    manager.create_symlink(source, target)

    assert manager.create_symlink(source, target) is False
    assert manager.is_symlink_to(target, source)


def test_regular_file_is_replaced_by_link(tmp_path: Path) -> None:
    source = tmp_path / "src.json"
    source.write_text('{"a": 1}', encoding="utf-8")
    target = tmp_path / "out.json"
    target.write_text("stale", encoding="utf-8")

    SymlinkManager().create_symlink(source, target)

    assert target.is_symlink()


def test_directory_is_never_replaced(tmp_path: Path) -> None:
    source = tmp_path / "src.json"
    source.write_text("{}", encoding="utf-8")
    (tmp_path / "out.json").mkdir()

    with pytest.raises(IsADirectoryError):
        SymlinkManager().create_symlink(source, tmp_path / "out.json")


def test_copy_over_link_does_not_touch_link_source(tmp_path: Path) -> None:
    template = tmp_path / "template.json"
    template.write_text("template", encoding="utf-8")
    fragment = tmp_path / "fragment.json"
    fragment.write_text("fragment", encoding="utf-8")
    target = tmp_path / "out.json"
    manager = SymlinkManager()
    manager.create_symlink(template, target)

    manager.copy_file(fragment, target)

    assert not target.is_symlink()
    assert target.read_text(encoding="utf-8") == "fragment"
    assert template.read_text(encoding="utf-8") == "template"


def test_remove_missing_target_is_not_an_error(tmp_path: Path) -> None:
    assert SymlinkManager().remove(tmp_path / "nothing") is False


def test_dangling_link_is_replaced() -> None:
    fs = FakeFileSystem()
    fs.add_file("/proj/src.json", "{}")
    fs.add_link("/proj/out.json", "gone.json")

    SymlinkManager(fs).create_symlink(Path("/proj/src.json"), Path("/proj/out.json"))

    assert fs.links["/proj/out.json"] == "src.json"
