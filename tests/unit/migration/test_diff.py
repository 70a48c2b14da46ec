from __future__ import annotations

import pytest

from filemerge.core.migration import DiffExtractor, ExtractionStrategy, count_changes, deep_equal, preserve_all_diff, smart_diff
from filemerge.core.strategies import deep_merge_all


class TestSmartDiff:
    def test_nested_change_bubbles_with_added_sibling(self) -> None:
        diff = smart_diff({"a": 1, "b": {"c": 2}}, {"a": 1, "b": {"c": 3, "d": 4}})

        assert diff == {"b": {"c": 3, "d": 4}}

    def test_identical_documents_have_no_diff(self) -> None:
        assert smart_diff({"a": [1, {"b": 2}]}, {"a": [1, {"b": 2}]}) is None

    def test_arrays_are_compared_whole(self) -> None:
        assert smart_diff({"list": [1, 2]}, {"list": [1, 2, 3]}) == {"list": [1, 2, 3]}

    def test_boolean_never_equals_number(self) -> None:
        assert smart_diff({"flag": 1}, {"flag": True}) == {"flag": True}

    def test_deleted_keys_are_not_represented(self) -> None:
        assert smart_diff({"a": 1, "gone": 2}, {"a": 1}) is None

    def test_non_object_current(self) -> None:
        assert smart_diff("a\n", "a\n") is None
        assert smart_diff("a\n", "b\n") == "b\n"
        assert smart_diff("text", {"a": 1}) == {"a": 1}

    def test_merging_diff_over_template_reproduces_changes(self) -> None:
        template = {"a": 1, "b": {"c": 2, "e": [1]}, "f": "x"}
        current = {"a": 2, "b": {"c": 2, "e": [1, 2], "g": True}, "f": "x", "h": None}

        diff = smart_diff(template, current)

        merged = deep_merge_all([template, diff])
        assert merged == {"a": 2, "b": {"c": 2, "e": [1, 2], "g": True}, "f": "x"}


class TestPreserveAllDiff:
    def test_only_keys_missing_from_template(self) -> None:
        diff = preserve_all_diff({"a": 1, "b": {"c": 2}}, {"a": 5, "b": {"c": 3, "d": 4}, "e": 6})

        assert diff == {"b": {"d": 4}, "e": 6}

    def test_nothing_new_gives_empty_object(self) -> None:
        assert preserve_all_diff({"a": 1}, {"a": 2}) == {}


def test_count_changes_counts_nested_keys() -> None:
    assert count_changes({"b": {"c": 3, "d": 4}, "e": 1}) == 4
    assert count_changes(None) == 0


def test_extractor_minimal_equals_smart() -> None:
    template, current = {"a": 1, "b": 2}, {"a": 1, "b": 3}
    extractor = DiffExtractor()

    smart = extractor.extract(template, current, "smart")
    minimal = extractor.extract(template, current, ExtractionStrategy.MINIMAL)

    assert smart.content == minimal.content == {"b": 3}
    assert minimal.strategy == "minimal"
    assert smart.changes == 1


def test_extractor_empty_diff() -> None:
    extracted = DiffExtractor().extract({"a": 1}, {"a": 1})

    assert extracted.is_empty
    assert extracted.changes == 0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("smart", ExtractionStrategy.SMART),
        ("smart-extract", ExtractionStrategy.SMART),
        ("Minimal", ExtractionStrategy.MINIMAL),
        ("preserve-all", ExtractionStrategy.PRESERVE_ALL),
    ],
)
def test_strategy_names(raw: str, expected: ExtractionStrategy) -> None:
    assert ExtractionStrategy.parse(raw) is expected


def test_unknown_strategy_name() -> None:
    with pytest.raises(ValueError, match="choose from"):
        ExtractionStrategy.parse("everything")


def test_analyze_classifies_top_level_keys() -> None:
    analysis = DiffExtractor().analyze({"a": 1, "b": {"c": 1}, "gone": 0}, {"a": 1, "b": {"c": 2}, "new": 1})

    assert analysis.identical is False
    assert analysis.added_keys == ["new"]
    assert analysis.modified_keys == ["b"]
    assert analysis.deleted_keys == ["gone"]
    assert analysis.change_count == 3


def test_deep_equal() -> None:
    assert deep_equal({"a": [1, {"b": 2.0}]}, {"a": [1, {"b": 2}]})
    assert not deep_equal({"a": 1}, {"a": 1, "b": 2})
    assert not deep_equal([True], [1])
