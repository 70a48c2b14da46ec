"""Discovery of templates, fragments and overrides."""
from __future__ import annotations

from .base import DiscoveredSources, SkippedSource, SourceDiscovery
from .fragments import FragmentDiscovery
from .metadata import parse_metadata, split_text_metadata, strip_metadata_keys
from .overrides import OverrideDiscovery, override_name_for, override_target_name
from .templates import TemplateDiscovery

__all__ = [
    "DiscoveredSources",
    "SkippedSource",
    "SourceDiscovery",
    "TemplateDiscovery",
    "FragmentDiscovery",
    "OverrideDiscovery",
    "parse_metadata",
    "split_text_metadata",
    "strip_metadata_keys",
    "override_name_for",
    "override_target_name",
]
