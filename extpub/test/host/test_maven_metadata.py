"""Tests for extpub.host.maven_metadata module."""

from __future__ import annotations

from pathlib import Path

import pytest

from extpub.build.project import Build, Project
from extpub.core.result import Err, Ok, Result
from extpub.git.repository import GitError
from extpub.host import maven_metadata
from extpub.host.lifecycle import LifecycleBasePlugin
from extpub.host.maven_metadata import (
    MavenBasePublishPlugin,
    MavenManifestPlugin,
    MavenScmPlugin,
    ScmInfo,
    ScmInfoPlugin,
)
from extpub.host.maven_publish import PublishingExtension, render_pom
from extpub.output.console import MockConsole


class FakeRepository:
    calls = 0

    def __init__(self, path: Path) -> None:
        self.path = path

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        type(self).calls += 1
        return Ok("https://github.com/acme/widgets")

    def head_commit(self) -> Result[str, GitError]:
        return Ok("0123abc")


class NoGitRepository(FakeRepository):
    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        return Err(GitError(command="remote get-url", message="not a git repository"))

    def head_commit(self) -> Result[str, GitError]:
        return Err(GitError(command="rev-parse HEAD", message="not a git repository"))


def _project(tmp_path: Path) -> Project:
    build = Build(tmp_path, "acme", environ={}, console=MockConsole())
    lib = build.root.create_child("lib")
    lib.version = "2.0.0"
    lib.group = "com.acme"
    return lib


class TestScmInfoPlugin:
    def test_reads_git_once(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(maven_metadata, "Repository", FakeRepository)
        monkeypatch.setattr(FakeRepository, "calls", 0)
        plugin = _project(tmp_path).plugins.apply(ScmInfoPlugin)
        assert plugin.info == ScmInfo(origin="https://github.com/acme/widgets", commit="0123abc")
        assert plugin.info == ScmInfo(origin="https://github.com/acme/widgets", commit="0123abc")
        assert FakeRepository.calls == 1

    def test_not_a_git_checkout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(maven_metadata, "Repository", NoGitRepository)
        lib = _project(tmp_path)
        assert lib.plugins.apply(ScmInfoPlugin).info == ScmInfo()
        console = lib.console
        assert isinstance(console, MockConsole)
        assert console.find("No scm origin for :lib")


class TestPomMetadata:
    def test_base_plugin_copies_project_description(self, tmp_path: Path) -> None:
        lib = _project(tmp_path)
        lib.plugins.apply(MavenBasePublishPlugin)
        publication = lib.extensions.get_by_type(PublishingExtension).publication("maven")
        publication.pom.description = "set on the pom"
        lib.description = "set on the project"

        render_pom(publication)

        assert publication.pom.name == "lib"
        assert publication.pom.description == "set on the project"

    def test_scm_and_manifest(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(maven_metadata, "Repository", FakeRepository)
        lib = _project(tmp_path)
        lib.plugins.apply(MavenScmPlugin)
        lib.plugins.apply(MavenManifestPlugin)
        publication = lib.extensions.get_by_type(PublishingExtension).publication("maven")

        xml = render_pom(publication)

        pom = publication.pom
        assert pom.url == "https://github.com/acme/widgets"
        assert pom.scm is not None
        assert pom.scm.connection == "scm:git:https://github.com/acme/widgets.git"
        assert pom.properties == {
            "nebula_Implementation_Title": "com.acme#lib;2.0.0",
            "nebula_Implementation_Version": "2.0.0",
            "nebula_Change": "0123abc",
        }
        assert "<nebula_Change>0123abc</nebula_Change>" in xml

    def test_scm_without_git(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(maven_metadata, "Repository", NoGitRepository)
        lib = _project(tmp_path)
        lib.plugins.apply(MavenScmPlugin)
        lib.plugins.apply(MavenManifestPlugin)
        publication = lib.extensions.get_by_type(PublishingExtension).publication("maven")
        render_pom(publication)
        assert publication.pom.scm is None
        assert "nebula_Change" not in publication.pom.properties


def test_lifecycle_tasks(tmp_path: Path) -> None:
    lib = _project(tmp_path)
    lib.plugins.apply(LifecycleBasePlugin)
    build_task = lib.tasks.named("build")
    assert [r.name for r in build_task.dependencies] == ["assemble", "check"]
    assert lib.tasks.named("check").group == "verification"
