from __future__ import annotations

import pytest

from filemerge.core.discovery import parse_metadata, split_text_metadata, strip_metadata_keys
from filemerge.core.exceptions import FragmentMetadataError
from filemerge.core.types import DEFAULT_FRAGMENT_PRIORITY, FragmentConditions


class TestParseMetadata:
    def test_defaults(self) -> None:
        meta = parse_metadata({"_targetPath": "tsconfig.json"})

        assert meta.target_paths == ("tsconfig.json",)
        assert meta.priority == DEFAULT_FRAGMENT_PRIORITY
        assert meta.merge_strategy is None
        assert meta.conditions is None
        assert meta.copy is False
        assert meta.active_only is True

    def test_all_keys(self) -> None:
        meta = parse_metadata(
            {
                "_targetPath": ["a.json", " b.json "],
                "_mergeStrategy": "replace",
                "_priority": 50,
                "_copy": True,
                "_activeOnly": False,
                "_conditions": {"activeModules": "auth", "env": "test", "platform": "linux"},
            }
        )

        assert meta.target_paths == ("a.json", "b.json")
        assert meta.merge_strategy == "replace"
        assert meta.priority == 50
        assert meta.copy is True
        assert meta.active_only is False
        assert meta.conditions == FragmentConditions(active_modules=("auth",), env="test", platform="linux")

    def test_empty_conditions_collapse_to_none(self) -> None:
        assert parse_metadata({"_targetPath": "a", "_conditions": {}}).conditions is None

    @pytest.mark.parametrize("raw", [None, "", "  ", [], [1]])
    def test_missing_or_invalid_target_path(self, raw) -> None:
        data = {} if raw is None else {"_targetPath": raw}

        with pytest.raises(FragmentMetadataError) as exc_info:
            parse_metadata(data)

        assert exc_info.value.context["field"] == "_targetPath"

    @pytest.mark.parametrize(
        "key, value",
        [
            ("_priority", "high"),
            ("_priority", True),
            ("_copy", "yes"),
            ("_activeOnly", 1),
            ("_mergeStrategy", 3),
            ("_conditions", ["auth"]),
        ],
    )
    def test_mistyped_keys(self, key: str, value) -> None:
        with pytest.raises(FragmentMetadataError):
            parse_metadata({"_targetPath": "a.json", key: value})


class TestTextMetadata:
    def test_leading_lines_are_metadata(self) -> None:
        text = "_targetPath=.gitignore,.dockerignore\n_priority=20\n_activeModules=auth, billing\nnode_modules/\n_notmeta=1\n"

        raw, body = split_text_metadata(text)

        assert raw == {
            "_targetPath": [".gitignore", ".dockerignore"],
            "_priority": 20,
            "_conditions": {"activeModules": ["auth", "billing"]},
        }
        assert body == "node_modules/\n_notmeta=1\n"

    def test_blank_line_after_metadata_is_dropped(self) -> None:
        raw, body = split_text_metadata("_targetPath=.gitignore\n_copy=true\n\ndist/\n")

        assert raw == {"_targetPath": ".gitignore", "_copy": True}
        assert body == "dist/\n"

    def test_text_without_metadata(self) -> None:
        raw, body = split_text_metadata("\ndist/\n")

        assert raw == {}
        assert body == "\ndist/\n"

    def test_non_numeric_priority_is_rejected_by_parse(self) -> None:
        raw, _ = split_text_metadata("_targetPath=a\n_priority=soon\n")

        with pytest.raises(FragmentMetadataError):
            parse_metadata(raw)


def test_strip_metadata_keys() -> None:
    assert strip_metadata_keys({"_targetPath": "a", "_priority": 1, "name": "x"}) == {"name": "x"}
