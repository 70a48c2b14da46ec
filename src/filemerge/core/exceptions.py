from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping


class FileMergeError(Exception):
    """Base exception for filemerge."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(FileMergeError):
    """Raised when the filemerge configuration is missing or invalid."""


class MissingVariablesError(FileMergeError, KeyError):
    """Raised when ``{{NAME}}`` placeholders reference undefined variables."""

    def __init__(self, missing: Iterable[str], template: str = "") -> None:
        self.missing: List[str] = list(missing)
        self.template = template
        message = f"Missing required environment variables: {', '.join(self.missing)}"
        FileMergeError.__init__(
            self, message, context={"missing": self.missing, "template": template}
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0]) if self.args else ""


class DiscoveryError(FileMergeError):
    """Raised when a discovered source cannot be loaded."""


class CodecError(DiscoveryError):
    """Raised when a file body cannot be parsed in its declared format."""


class FragmentMetadataError(DiscoveryError):
    """Raised when fragment metadata is missing or malformed."""


class MergeError(FileMergeError):
    """Raised when a merge strategy cannot produce a result."""


class MergeConflictError(MergeError):
    """Raised when a ``null`` deletion targets a key that holds real content."""

    def __init__(self, key: str, *, path: str = "", context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx.update({"key": key, "path": path})
        where = f"{path}.{key}" if path else key
        super().__init__(
            f"Cannot delete '{where}' with null: it already holds a value from an earlier source",
            context=ctx,
        )
        self.key = key
        self.path = path


class MergeValidationError(MergeError):
    """Raised in strict mode when a source fails strategy validation."""


class UnknownStrategyError(MergeError, KeyError):
    """Raised when a merge strategy name is not registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ApplyError(FileMergeError):
    """Raised when an apply run finished with failed targets."""


class ManagementError(FileMergeError):
    """Raised when add/remove/override is used on a file in the wrong state."""


class BackupError(FileMergeError):
    """Raised when a backup cannot be created or restored."""


__all__ = [
    "FileMergeError",
    "ConfigError",
    "MissingVariablesError",
    "DiscoveryError",
    "CodecError",
    "FragmentMetadataError",
    "MergeError",
    "MergeConflictError",
    "MergeValidationError",
    "UnknownStrategyError",
    "ApplyError",
    "ManagementError",
    "BackupError",
]
