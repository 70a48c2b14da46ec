"""Parse and stringify managed files by format (JSON, YAML, TOML, text)."""
from __future__ import annotations

import datetime
import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Union

import tomlkit
import yaml
from tomlkit.exceptions import TOMLKitError

from .exceptions import CodecError
from .types import ConfigValue, is_mapping


class Format(str, Enum):
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    TEXT = "text"

    @property
    def is_structured(self) -> bool:
        return self is not Format.TEXT


JSON_SUFFIXES = (".json", ".jsonc", ".json5", ".code-workspace")
YAML_SUFFIXES = (".yaml", ".yml")
TOML_SUFFIXES = (".toml",)

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")

# JSON has no comments; generated and skeleton files carry one as a leading key.
HEADER_KEY = "//"


def detect_format(path: Union[str, Path]) -> Format:
    name = Path(path).name.lower()
    if name.endswith(JSON_SUFFIXES):
        return Format.JSON
    if name.endswith(YAML_SUFFIXES):
        return Format.YAML
    if name.endswith(TOML_SUFFIXES):
        return Format.TOML
    return Format.TEXT


def _parse_json(text: str, lenient: bool) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        if not lenient:
            raise CodecError(f"Invalid JSON: {exc}") from exc
        try:
            return json.loads(_TRAILING_COMMA.sub(r"\1", text))
        except json.JSONDecodeError:
            raise CodecError(f"Invalid JSON: {exc}") from exc


def parse(text: str, fmt: Format, *, lenient: bool = False) -> ConfigValue:
    """Parse ``text`` as ``fmt``.

    ``lenient`` retries JSON after stripping trailing commas (JSONC files
    such as VS Code workspaces).

    Raises:
        CodecError: If the text is not valid in the given format.
    """
    if fmt is Format.JSON:
        return _parse_json(text, lenient)
    if fmt is Format.YAML:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CodecError(f"Invalid YAML: {exc}") from exc
    if fmt is Format.TOML:
        try:
            return tomlkit.parse(text).unwrap()
        except TOMLKitError as exc:
            raise CodecError(f"Invalid TOML: {exc}") from exc
    return text


def _drop_nulls(value: Any) -> Any:
    # TOML has no null; keys holding None are omitted.
    if isinstance(value, dict):
        return {k: _drop_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_nulls(v) for v in value if v is not None]
    return value


def _json_default(value: Any) -> Any:
    # YAML and TOML sources may carry dates and times.
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def stringify(value: ConfigValue, fmt: Format) -> str:
    """Serialize ``value`` as ``fmt`` (always newline-terminated for structured formats)."""
    if fmt is Format.JSON:
        return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default) + "\n"
    if fmt is Format.YAML:
        try:
            return yaml.safe_dump(value, sort_keys=False, default_flow_style=False, allow_unicode=True)
        except yaml.YAMLError as exc:
            raise CodecError(f"Cannot write YAML: {exc}") from exc
    if fmt is Format.TOML:
        if not isinstance(value, dict):
            raise CodecError("TOML documents must be tables")
        return tomlkit.dumps(_drop_nulls(value))
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)


def strip_header(content: ConfigValue) -> ConfigValue:
    """Remove a JSON provenance key from parsed content."""
    if is_mapping(content) and HEADER_KEY in content:
        return {k: v for k, v in content.items() if k != HEADER_KEY}
    return content


__all__ = [
    "HEADER_KEY",
    "strip_header",
    "Format",
    "JSON_SUFFIXES",
    "YAML_SUFFIXES",
    "TOML_SUFFIXES",
    "detect_format",
    "parse",
    "stringify",
]
