"""End-to-end composition of a small monorepo: engine, status, validation and CLI."""
from __future__ import annotations

import json

import pytest

from filemerge.cli._dispatcher import main
from filemerge.core.codecs import HEADER_KEY
from filemerge.core.engine import ACTION_COPY, ACTION_MERGE, ACTION_SYMLINK, ACTION_UNCHANGED, SourceResolutionEngine
from filemerge.core.status import StatusReporter
from filemerge.core.validation import Validator
from helpers.project import ProjectDir

pytestmark = pytest.mark.integration

ENV = {"STAGE": "staging"}


@pytest.fixture
def monorepo(project: ProjectDir) -> ProjectDir:
    project.template(
        "docker-compose.yml",
        {"services": {"api": {"image": "api:latest", "ports": ["3000:3000"]}}},
    )
    project.fragment(
        "atom-framework/modules/redis/docker-compose.fragment.yml",
        {"_targetPath": "docker-compose.yml", "services": {"redis": {"image": "redis:7"}}},
    )
    project.write_yaml("docker-compose.overrides.yml", {"services": {"api": {"ports": ["8080:3000"]}}})
    project.activate_module("redis")

    project.template(
        ".gitlab-ci.yml",
        {
            "stages": ["build", "test"],
            "variables": {"NODE_VERSION": "20"},
            "image": "node:20",
            "build": {"stage": "build", "script": ["pnpm build"]},
        },
    )
    project.fragment(
        "packages/api/ci.fragment.yml",
        {"_targetPath": ".gitlab-ci.yml", "test": {"stage": "test", "script": ["pnpm test"]}},
    )

    project.template(".vscode/tasks.json", {"version": "2.0.0", "tasks": [{"label": "dev"}]})
    project.fragment(
        "packages/api/tasks.fragment.json",
        {"_targetPath": ".vscode/tasks.json", "tasks": [{"label": "api:test"}]},
    )

    project.template(".gitignore", "node_modules/\n")
    project.fragment("packages/api/ignore.fragment.txt", "_targetPath=.gitignore\ncoverage/\n")

    project.template("tsconfig.base.json", {"compilerOptions": {"strict": True}})
    project.fragment("deployment/env.fragment.json", {"_targetPath": "deploy/{{STAGE}}.json", "replicas": 2})
    project.fragment("packages/api/Dockerfile.fragment.txt", "_targetPath=packages/api/Dockerfile\n_copy=true\nFROM node:20\n")
    return project


def _apply(project: ProjectDir):
    return SourceResolutionEngine(project.root, environ=ENV).apply()


def test_apply_composes_every_target(monorepo: ProjectDir) -> None:
    report = _apply(monorepo)

    assert report.ok, [f.to_dict() for f in report.failures]
    actions = {r.relative_path: r.action for r in report.results}
    assert actions == {
        ".gitignore": ACTION_MERGE,
        ".gitlab-ci.yml": ACTION_MERGE,
        ".vscode/tasks.json": ACTION_MERGE,
        "deploy/staging.json": ACTION_SYMLINK,
        "docker-compose.yml": ACTION_MERGE,
        "packages/api/Dockerfile": ACTION_COPY,
        "tsconfig.base.json": ACTION_SYMLINK,
    }
    assert report.active_modules == frozenset({"redis"})

    compose = monorepo.read_yaml("docker-compose.yml")
    assert compose["services"]["api"] == {"image": "api:latest", "ports": ["8080:3000"]}
    assert compose["services"]["redis"] == {"image": "redis:7"}

    ci = monorepo.read_yaml(".gitlab-ci.yml")
    assert ci["api:test"] == {"stage": "test", "script": ["pnpm test"]}
    assert ci["stages"] == ["build", "test"]

    tasks = monorepo.read_json(".vscode/tasks.json")
    assert HEADER_KEY in tasks
    assert [t["label"] for t in tasks["tasks"]] == ["api:test", "dev"]

    gitignore = monorepo.read(".gitignore")
    assert gitignore.startswith("#")
    assert gitignore.endswith("node_modules/\ncoverage/\n")

    assert monorepo.read_json("deploy/staging.json")["replicas"] == 2


def test_second_apply_is_stable(monorepo: ProjectDir) -> None:
    _apply(monorepo)
    merged = [".gitignore", ".gitlab-ci.yml", ".vscode/tasks.json", "docker-compose.yml"]
    first = {name: monorepo.read(name) for name in merged}

    report = _apply(monorepo)

    assert {name: monorepo.read(name) for name in merged} == first
    unchanged = sorted(r.relative_path for r in report.results if r.action == ACTION_UNCHANGED)
    assert unchanged == ["deploy/staging.json", "tsconfig.base.json"]


def test_deactivating_a_module_drops_its_fragment(monorepo: ProjectDir) -> None:
    _apply(monorepo)
    monorepo.path("modules/redis").unlink()

    _apply(monorepo)

    assert "redis" not in monorepo.read_yaml("docker-compose.yml")["services"]


def test_status_and_validation_agree_with_apply(monorepo: ProjectDir) -> None:
    _apply(monorepo)

    status = StatusReporter(monorepo.root, environ=ENV).report()
    assert status.summary() == {"total": 7, "symlinked": 2, "generated": 4, "copied": 1, "missing": 0}

    validation = Validator(monorepo.root, environ=ENV).validate()
    assert validation.valid
    assert validation.exit_code(strict=True) == 0


def test_cli_round_trip(monorepo: ProjectDir, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("STAGE", "staging")
    root = str(monorepo.root)

    assert main(["apply", "--json", "--repo-root", root]) == 0
    applied = json.loads(capsys.readouterr().out)
    assert applied["summary"]["merge"] == 4
    assert applied["active_modules"] == ["redis"]

    assert main(["status", "--json", "--repo-root", root]) == 0
    status = json.loads(capsys.readouterr().out)
    assert status["summary"]["missing"] == 0

    assert main(["override", "tsconfig.base.json", "--repo-root", root]) == 0
    assert "Created tsconfig.base.overrides.json" in capsys.readouterr().out
    assert not monorepo.path("tsconfig.base.json").is_symlink()
