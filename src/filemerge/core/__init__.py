"""filemerge core library: discovery, merge strategies and the resolution engine."""

from . import exceptions  # noqa: F401
