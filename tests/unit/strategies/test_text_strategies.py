from __future__ import annotations

from pathlib import Path

from filemerge.core.strategies import AppendLinesStrategy, ReplaceStrategy
from filemerge.core.types import MergeContext

CTX = MergeContext(target_path=Path("/proj/.gitignore"), relative_path=".gitignore")


def test_append_lines_unions_in_first_seen_order() -> None:
    result = AppendLinesStrategy().run(["a\nb\n", "b\nc\n"], CTX)

    assert result == "a\nb\nc\n"


def test_append_lines_drops_blank_lines() -> None:
    result = AppendLinesStrategy().run(["a\n\n\nb", "\n  \nc\n"], CTX)

    assert result == "a\nb\nc\n"


def test_append_lines_single_source_identity() -> None:
    text = "node_modules/\ndist/\n"

    assert AppendLinesStrategy().run([text], CTX) == text


def test_append_lines_is_idempotent() -> None:
    once = AppendLinesStrategy().run(["x\ny\n", "y\nz\n"], CTX)

    assert AppendLinesStrategy().run([once, once], CTX) == once


def test_append_lines_validates_text() -> None:
    strategy = AppendLinesStrategy()

    assert strategy.validate("a\n").valid
    assert not strategy.validate({"a": 1}).valid


def test_replace_takes_the_last_source() -> None:
    assert ReplaceStrategy().run(["root = true\n", "indent_size = 4\n"], CTX) == "indent_size = 4\n"


def test_replace_returns_an_independent_copy() -> None:
    source = {"a": [1]}

    result = ReplaceStrategy().run([source], CTX)
    result["a"].append(2)

    assert source == {"a": [1]}
