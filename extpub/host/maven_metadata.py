"""Plugins that fill POM metadata from the project and its git checkout.

- ``ScmInfoPlugin`` reads the origin URL and HEAD commit once, on first use.
- ``MavenBasePublishPlugin`` copies the project name and description into
  every POM. The description is copied unconditionally, so a description set
  directly on the POM is overwritten; set it on the project instead.
- ``MavenScmPlugin`` adds the url and scm block.
- ``MavenManifestPlugin`` records build provenance as POM properties.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.core.result import Err, Ok
from extpub.git.repository import Repository
from extpub.host.maven_publish import MavenPublication, MavenPublishPlugin, Pom, PublishingExtension, Scm
from extpub.output.console import Style

__all__ = [
    "MavenBasePublishPlugin",
    "MavenManifestPlugin",
    "MavenScmPlugin",
    "ScmInfo",
    "ScmInfoPlugin",
]


@dataclass(frozen=True, slots=True)
class ScmInfo:
    origin: str | None = None
    commit: str | None = None


class ScmInfoPlugin(Plugin):
    id = "info-scm"

    def apply(self, project: Project) -> None:
        self._project = project
        self._info: ScmInfo | None = None

    @property
    def info(self) -> ScmInfo:
        if self._info is None:
            self._info = self._read()
        return self._info

    def _read(self) -> ScmInfo:
        repo = Repository(self._project.project_dir)
        origin: str | None = None
        commit: str | None = None

        match repo.remote_url():
            case Ok(url):
                origin = url
            case Err(e):
                self._project.console.print(f"No scm origin for {self._project.path}: {e.message}", Style.DIM)

        match repo.head_commit():
            case Ok(sha):
                commit = sha
            case Err(_):
                pass

        return ScmInfo(origin=origin, commit=commit)


type _PomHook = Callable[[MavenPublication, Pom], None]


def _each_pom(project: Project, hook: _PomHook) -> None:
    def attach(publication: MavenPublication) -> None:
        publication.pom.when_generated(lambda pom: hook(publication, pom))

    project.extensions.get_by_type(PublishingExtension).publications.when_added(attach)


class MavenBasePublishPlugin(Plugin):
    id = "nebula.maven-base-publish"

    def apply(self, project: Project) -> None:
        project.plugins.apply(MavenPublishPlugin)

        def base(publication: MavenPublication, pom: Pom) -> None:
            pom.name = pom.name or project.name
            pom.description = project.description

        _each_pom(project, base)


class MavenScmPlugin(Plugin):
    id = "nebula.maven-scm"

    def apply(self, project: Project) -> None:
        project.plugins.apply(MavenBasePublishPlugin)
        scm_info = project.plugins.apply(ScmInfoPlugin)

        def scm(publication: MavenPublication, pom: Pom) -> None:
            origin = scm_info.info.origin
            if origin is None:
                return
            pom.url = pom.url or origin
            pom.scm = Scm(url=origin, connection=f"scm:git:{origin}.git", tag=scm_info.info.commit)

        _each_pom(project, scm)


class MavenManifestPlugin(Plugin):
    id = "nebula.maven-manifest"

    def apply(self, project: Project) -> None:
        project.plugins.apply(MavenBasePublishPlugin)
        scm_info = project.plugins.apply(ScmInfoPlugin)

        def manifest(publication: MavenPublication, pom: Pom) -> None:
            pom.properties.setdefault(
                "nebula_Implementation_Title",
                f"{publication.resolved_group_id}#{publication.resolved_artifact_id};"
                f"{publication.resolved_version}",
            )
            pom.properties.setdefault("nebula_Implementation_Version", publication.resolved_version)
            if scm_info.info.commit is not None:
                pom.properties.setdefault("nebula_Change", scm_info.info.commit)

        _each_pom(project, manifest)
