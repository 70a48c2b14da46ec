from __future__ import annotations

import pytest

from filemerge.core.types import as_list, as_mapping, as_text, type_name


@pytest.mark.parametrize(
    "value, expected",
    [(None, "null"), (True, "boolean"), (3, "number"), (1.5, "number"), ("x", "string"), ([], "array"), ({}, "object")],
)
def test_type_name(value, expected: str) -> None:
    assert type_name(value) == expected


def test_downcasts_return_the_value_unchanged() -> None:
    obj, items = {"a": 1}, [1]
    assert as_mapping(obj) is obj
    assert as_list(items) is items
    assert as_text("x") == "x"


def test_downcast_failures_name_both_kinds() -> None:
    with pytest.raises(TypeError, match="services must be an object, got array"):
        as_mapping([], "services")
    with pytest.raises(TypeError, match="content must be an array, got boolean"):
        as_list(False)
    with pytest.raises(TypeError, match="body must be a string, got null"):
        as_text(None, "body")
