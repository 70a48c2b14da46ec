"""Tests for configuration layering, environment overrides and caching."""
from __future__ import annotations

import pytest

from filemerge.core.config import cache as cache_module
from filemerge.core.config.cache import (
    clear_all_caches,
    get_cached_config,
    is_cached,
    register_cache_clearer,
)
from filemerge.core.config.manager import ConfigManager
from filemerge.core.exceptions import ConfigError
from helpers.project import ProjectDir


def test_bundled_defaults_load_and_validate(project: ProjectDir) -> None:
    cfg = ConfigManager(project.root).load_config()

    assert cfg["merge"]["mode"] == "overlay"
    assert cfg["layout"]["template_prefix"] == "__"
    assert ".filemerge/**" in cfg["layout"]["ignore_globs"]
    assert cfg["migrate"]["review_threshold"] == 20


def test_project_config_is_layered_over_defaults(project: ProjectDir) -> None:
    project.config("merge", {"merge": {"mode": "accumulate"}})
    project.config("layout", {"layout": {"ignore_globs": ["+", "**/build/**"]}})

    cfg = ConfigManager(project.root).load_config()

    assert cfg["merge"]["mode"] == "accumulate"
    assert cfg["merge"]["headers"] is True
    assert cfg["layout"]["ignore_globs"][-1] == "**/build/**"
    assert "**/node_modules/**" in cfg["layout"]["ignore_globs"]


def test_project_files_load_in_alphabetical_order(project: ProjectDir) -> None:
    project.config("10-base", {"merge": {"max_workers": 2}})
    project.config("20-local", {"merge": {"max_workers": 4}})

    assert ConfigManager(project.root).get("merge.max_workers") == 4


class TestEnvironmentOverrides:
    def test_nested_keys_override_files(self, project: ProjectDir, monkeypatch: pytest.MonkeyPatch) -> None:
        project.config("merge", {"merge": {"mode": "accumulate"}})
        monkeypatch.setenv("FILEMERGE_MERGE__MODE", "overlay")

        assert ConfigManager(project.root).get("merge.mode") == "overlay"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("true", True),
            ("FALSE", False),
            ("8", 8),
            ("0.75", 0.75),
            ('["a", "b"]', ["a", "b"]),
            ('{"x": 1}', {"x": 1}),
            (" plain ", "plain"),
            ("{not json}", "{not json}"),
        ],
    )
    def test_values_are_coerced(self, project: ProjectDir, raw: str, expected) -> None:
        assert ConfigManager(project.root)._coerce_type(raw) == expected

    def test_single_segment_and_reserved_keys_are_ignored(
        self, project: ProjectDir, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FILEMERGE_VERBOSE", "1")

        cfg = get_cached_config(repo_root=project.root, validate=False)

        assert "verbose" not in cfg
        assert "project_root" not in cfg

    def test_empty_segment_is_rejected(self, project: ProjectDir, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FILEMERGE_MERGE____MODE", "overlay")

        with pytest.raises(ConfigError, match="empty segment"):
            ConfigManager(project.root).load_config()

    def test_env_change_invalidates_cache(self, project: ProjectDir, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_cached_config(repo_root=project.root, validate=True)
        monkeypatch.setenv("FILEMERGE_WATCH__DEBOUNCE_SECONDS", "2.5")
        second = get_cached_config(repo_root=project.root, validate=True)

        assert first is not second
        assert second["watch"]["debounce_seconds"] == 2.5


class TestValidation:
    def test_unknown_merge_mode_fails_schema(self, project: ProjectDir) -> None:
        project.config("merge", {"merge": {"mode": "sideways"}})

        with pytest.raises(ConfigError, match="merge.mode"):
            ConfigManager(project.root).load_config()

    def test_unvalidated_load_skips_schema(self, project: ProjectDir) -> None:
        project.config("merge", {"merge": {"mode": "sideways"}})

        assert get_cached_config(repo_root=project.root, validate=False)["merge"]["mode"] == "sideways"

    def test_invalid_yaml_fails_closed(self, project: ProjectDir) -> None:
        project.write(".filemerge/config/broken.yaml", "merge: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigManager(project.root).load_config()

    def test_non_mapping_file_is_rejected(self, project: ProjectDir) -> None:
        project.write(".filemerge/config/list.yaml", "- a\n- b\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            ConfigManager(project.root).load_config()


class TestCache:
    def test_same_instance_until_cleared(self, project: ProjectDir) -> None:
        first = get_cached_config(repo_root=project.root)
        assert get_cached_config(repo_root=project.root) is first
        assert is_cached(project.root)

        clear_all_caches()

        assert not is_cached(project.root)
        assert get_cached_config(repo_root=project.root) is not first

    def test_registered_clearers_run_on_clear(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cache_module, "_cache_clearers", {})
        calls = []
        register_cache_clearer("test-clearer", lambda: calls.append(1))

        clear_all_caches()

        assert calls == [1]

    def test_default_root_comes_from_environment(self, project: ProjectDir) -> None:
        get_cached_config()
        assert is_cached(project.root)

    def test_get_returns_default_for_missing_keys(self, project: ProjectDir) -> None:
        manager = ConfigManager(project.root)
        assert manager.get("merge.nope", "fallback") == "fallback"
        assert manager.get("merge.mode.deeper") is None
