from __future__ import annotations

import datetime
import json

import pytest

from filemerge.core.codecs import (
    HEADER_KEY,
    Format,
    detect_format,
    parse,
    strip_header,
    stringify,
)
from filemerge.core.exceptions import CodecError


@pytest.mark.parametrize(
    "name, fmt",
    [
        ("tsconfig.json", Format.JSON),
        ("app.code-workspace", Format.JSON),
        ("settings.jsonc", Format.JSON),
        ("docker-compose.yml", Format.YAML),
        ("pnpm-workspace.yaml", Format.YAML),
        ("pyproject.toml", Format.TOML),
        (".gitignore", Format.TEXT),
        ("Dockerfile", Format.TEXT),
        (".gitignore.overrides", Format.TEXT),
    ],
)
def test_detect_format(name: str, fmt: Format) -> None:
    assert detect_format(name) is fmt


def test_invalid_json_raises_codec_error() -> None:
    with pytest.raises(CodecError, match="Invalid JSON"):
        parse('{"a": }', Format.JSON)


def test_lenient_json_accepts_trailing_commas() -> None:
    text = '{\n  "folders": [{"path": "."},],\n}'

    with pytest.raises(CodecError):
        parse(text, Format.JSON)
    assert parse(text, Format.JSON, lenient=True) == {"folders": [{"path": "."}]}


def test_invalid_yaml_raises_codec_error() -> None:
    with pytest.raises(CodecError, match="Invalid YAML"):
        parse("a: [1, 2", Format.YAML)


def test_toml_parses_to_plain_python_values() -> None:
    value = parse('[tool.black]\nline-length = 100\n', Format.TOML)

    assert value == {"tool": {"black": {"line-length": 100}}}
    assert type(value) is dict


def test_text_is_returned_verbatim() -> None:
    assert parse("node_modules/\n", Format.TEXT) == "node_modules/\n"


def test_stringify_json_is_indented_and_newline_terminated() -> None:
    assert stringify({"a": [1]}, Format.JSON) == '{\n  "a": [\n    1\n  ]\n}\n'


def test_stringify_json_writes_dates_as_iso_strings() -> None:
    value = {"day": datetime.date(2024, 1, 1), "at": datetime.datetime(2024, 1, 1, 12, 30)}

    assert json.loads(stringify(value, Format.JSON)) == {"day": "2024-01-01", "at": "2024-01-01T12:30:00"}


def test_stringify_json_rejects_other_objects() -> None:
    with pytest.raises(TypeError):
        stringify({"values": {1, 2}}, Format.JSON)


def test_stringify_yaml_keeps_key_order() -> None:
    text = stringify({"b": 1, "a": 2}, Format.YAML)

    assert text.index("b:") < text.index("a:")


def test_stringify_toml_omits_nulls() -> None:
    text = stringify({"a": 1, "b": None, "t": {"c": None, "d": "x"}}, Format.TOML)

    assert parse(text, Format.TOML) == {"a": 1, "t": {"d": "x"}}


def test_stringify_toml_requires_table() -> None:
    with pytest.raises(CodecError):
        stringify([1, 2], Format.TOML)


def test_strip_header_removes_only_the_comment_key() -> None:
    content = {HEADER_KEY: "generated", "a": 1}

    assert strip_header(content) == {"a": 1}
    assert content == {HEADER_KEY: "generated", "a": 1}
    assert strip_header("text") == "text"
