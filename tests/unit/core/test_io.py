from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from filemerge.core.utils.io import iter_yaml_files, read_text, read_yaml, write_text


def test_iter_yaml_files_prefers_yaml_over_yml(tmp_path: Path) -> None:
    for name in ("b.yml", "b.yaml", "a.yml", "notes.txt"):
        (tmp_path / name).write_text("x: 1\n", encoding="utf-8")

    assert [p.name for p in iter_yaml_files(tmp_path)] == ["a.yml", "b.yaml"]


def test_iter_yaml_files_missing_dir(tmp_path: Path) -> None:
    assert iter_yaml_files(tmp_path / "absent") == []


def test_read_yaml_defaults_for_missing_empty_and_invalid(tmp_path: Path) -> None:
    (tmp_path / "empty.yaml").write_text("# nothing\n", encoding="utf-8")
    (tmp_path / "bad.yaml").write_text("a: [1\n", encoding="utf-8")

    assert read_yaml(tmp_path / "absent.yaml", default={}) == {}
    assert read_yaml(tmp_path / "empty.yaml", default={}) == {}
    assert read_yaml(tmp_path / "bad.yaml", default={}) == {}
    with pytest.raises(yaml.YAMLError):
        read_yaml(tmp_path / "bad.yaml", raise_on_error=True)


def test_write_text_creates_parents_and_replaces_links(tmp_path: Path) -> None:
    source = tmp_path / "source.txt"
    source.write_text("source\n", encoding="utf-8")
    link = tmp_path / "out" / "target.txt"
    link.parent.mkdir()
    link.symlink_to(source)

    write_text(link, "generated\n")

    assert not link.is_symlink()
    assert read_text(link) == "generated\n"
    assert read_text(source) == "source\n"
