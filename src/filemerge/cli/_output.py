"""Unified CLI output formatting utilities.

Every command prints through ``OutputFormatter`` so that ``--json`` output
stays machine-readable; diagnostics go to the logging handler on stderr.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Iterable, Optional

from filemerge.core.exceptions import FileMergeError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON; otherwise output text
            indent: JSON indentation level
        """
        self.json_mode = json_mode
        self.indent = indent

    def success(
        self,
        data: Dict[str, Any],
        message: str,
        *,
        status: str = "success",
    ) -> None:
        """Output success result.

        Args:
            data: Result data dictionary
            message: Human-readable message (used in text mode)
            status: Status string for JSON output
        """
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        else:
            print(message)

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        error_code: Optional[str] = None,
    ) -> None:
        """Output error result.

        ``FileMergeError`` payloads keep their code and context in JSON mode.
        """
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, FileMergeError):
                output = error.to_json_error()
                output["message"] = msg
                if error_code:
                    output["code"] = error_code
            else:
                output = {"code": error_code or "error", "message": msg}
            print(json.dumps({"error": output}, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str = "") -> None:
        """Output plain text (suppressed in JSON mode)."""
        if not self.json_mode:
            print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")

    def text_list(self, items: Iterable[Any], prefix: str = "  - ", limit: Optional[int] = None) -> None:
        """Output a bulleted list, truncated after ``limit`` items."""
        if self.json_mode:
            return
        items = list(items)
        shown = items if limit is None else items[:limit]
        for item in shown:
            print(f"{prefix}{item}")
        if limit is not None and len(items) > limit:
            print(f"{' ' * len(prefix)}... and {len(items) - limit} more")


def format_json(data: Any, indent: int = 2) -> str:
    return json.dumps(data, indent=indent, default=str)


def print_success(message: str) -> None:
    """Print success message with checkmark."""
    print(f"✓ {message}")


def print_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


__all__ = [
    "OutputFormatter",
    "format_json",
    "print_success",
    "print_error",
]
