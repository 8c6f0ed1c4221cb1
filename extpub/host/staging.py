"""Staging-repository lifecycle on a Nexus-style artifact host.

Applied to the root project only. Artifacts bound for the host are uploaded
into a staging repository that must be initialized first, then closed
(validated by the host) and released (made public):

    initializeSonatypeStagingRepository
      <- publish<Pub>PublicationToSonatypeRepository (every project)
    closeSonatypeStagingRepository         (runs after initialize and every upload)
    releaseSonatypeStagingRepository       (runs after close)
    closeAndReleaseSonatypeStagingRepository -> close, release

Every project that applies maven-publish gets a ``sonatype`` publishing
repository and a ``publishToSonatype`` aggregate. The host calls themselves
are simulated; the staging state is tracked in memory.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta

from extpub.build.errors import ConfigurationError
from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.build.tasks import Task
from extpub.host.maven_publish import MavenPublishPlugin, PublishingExtension, PublishToMavenRepository

__all__ = [
    "CloseStagingRepository",
    "InitializeStagingRepository",
    "NexusPublishExtension",
    "NexusRepository",
    "NexusStagingPlugin",
    "ReleaseStagingRepository",
    "StagingRepository",
    "CLOSE_AND_RELEASE_TASK_NAME",
    "CLOSE_TASK_NAME",
    "INITIALIZE_TASK_NAME",
    "PUBLISH_TO_SONATYPE_TASK_NAME",
    "RELEASE_TASK_NAME",
    "SONATYPE_REPOSITORY_NAME",
]

SONATYPE_REPOSITORY_NAME = "sonatype"

INITIALIZE_TASK_NAME = "initializeSonatypeStagingRepository"
CLOSE_TASK_NAME = "closeSonatypeStagingRepository"
RELEASE_TASK_NAME = "releaseSonatypeStagingRepository"
CLOSE_AND_RELEASE_TASK_NAME = "closeAndReleaseSonatypeStagingRepository"
PUBLISH_TO_SONATYPE_TASK_NAME = "publishToSonatype"

DEFAULT_NEXUS_URL = "https://oss.sonatype.org/service/local/"
DEFAULT_SNAPSHOT_REPOSITORY_URL = "https://oss.sonatype.org/content/repositories/snapshots/"
DEFAULT_TIMEOUT = timedelta(minutes=5)


@dataclass
class NexusRepository:
    name: str
    nexus_url: str = DEFAULT_NEXUS_URL
    snapshot_repository_url: str = DEFAULT_SNAPSHOT_REPOSITORY_URL
    username: str | None = None
    password: str | None = field(default=None, repr=False)


def _repositories() -> dict[str, NexusRepository]:
    return {}


@dataclass
class NexusPublishExtension:
    connect_timeout: timedelta = DEFAULT_TIMEOUT
    client_timeout: timedelta = DEFAULT_TIMEOUT
    repositories: dict[str, NexusRepository] = field(default_factory=_repositories)

    def sonatype(self, configure: Callable[[NexusRepository], None] | None = None) -> NexusRepository:
        repo = self.repositories.setdefault(
            SONATYPE_REPOSITORY_NAME, NexusRepository(SONATYPE_REPOSITORY_NAME)
        )
        if configure is not None:
            configure(repo)
        return repo


@dataclass
class StagingRepository:
    """In-memory state of the one staging repository of a build."""

    id: str | None = None
    closed: bool = False
    released: bool = False

    @property
    def initialized(self) -> bool:
        return self.id is not None


class _StagingTask(Task):
    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.group = "publishing"
        self.plugin: NexusStagingPlugin | None = None

    @property
    def staging(self) -> StagingRepository:
        assert self.plugin is not None
        return self.plugin.staging

    @property
    def repository(self) -> NexusRepository:
        assert self.plugin is not None
        return self.plugin.extension.sonatype()


class InitializeStagingRepository(_StagingTask):
    def run(self) -> None:
        project = self.project
        self.staging.id = f"{project.group or project.name}-1000".replace(".", "")
        self.project.console.info(
            f"Initialized staging repository {self.staging.id} at {self.repository.nexus_url}"
        )


class CloseStagingRepository(_StagingTask):
    def run(self) -> None:
        self.project.console.info(f"Closing staging repository {self.staging.id}")
        self.staging.closed = True


class ReleaseStagingRepository(_StagingTask):
    def run(self) -> None:
        self.project.console.info(f"Releasing staging repository {self.staging.id}")
        self.staging.released = True


class NexusStagingPlugin(Plugin):
    id = "io.github.gradle-nexus.publish-plugin"

    def apply(self, project: Project) -> None:
        if not project.is_root:
            raise ConfigurationError(
                f"The {self.id} plugin must be applied to the root project, not '{project.path}'"
            )
        self._root = project
        self.staging = StagingRepository()
        project.build.before_execution(self._reset_staging)
        self.extension = project.extensions.add("nexus_publishing", NexusPublishExtension())
        self.extension.sonatype()

        def bind(task: _StagingTask) -> None:
            task.plugin = self

        tasks = project.tasks
        initialize = tasks.register(INITIALIZE_TASK_NAME, InitializeStagingRepository, bind)
        close = tasks.register(CLOSE_TASK_NAME, CloseStagingRepository, bind)
        release = tasks.register(RELEASE_TASK_NAME, ReleaseStagingRepository, bind)
        close.only_if(lambda _: self.staging.initialized, "no staging repository was initialized")
        release.only_if(lambda _: self.staging.initialized, "no staging repository was initialized")
        release.only_if(lambda _: self.staging.closed, "staging repository is not closed")
        close.must_run_after(initialize)
        release.must_run_after(close)
        tasks.register(CLOSE_AND_RELEASE_TASK_NAME, configure=lambda t: t.depends_on(close, release))

        project.build.each_project(
            lambda p: p.plugins.with_plugin(MavenPublishPlugin, lambda _: self._configure(p))
        )

    def _reset_staging(self) -> None:
        # Each run opens its own staging repository.
        self.staging = StagingRepository()

    def _staging_url(self, project: Project) -> str:
        repo = self.extension.sonatype()
        if project.version.endswith("-SNAPSHOT"):
            return repo.snapshot_repository_url
        if self.staging.id is not None:
            return f"{repo.nexus_url}staging/deployByRepositoryId/{self.staging.id}/"
        return f"{repo.nexus_url}staging/deploy/maven2/"

    def _configure(self, project: Project) -> None:
        publishing = project.extensions.get_by_type(PublishingExtension)
        publishing.repository(SONATYPE_REPOSITORY_NAME, lambda: self._staging_url(project))
        project.tasks.register(
            PUBLISH_TO_SONATYPE_TASK_NAME,
            configure=lambda t: t.depends_on("publishAllPublicationsToSonatypeRepository"),
        )

        initialize = self._root.task_ref(INITIALIZE_TASK_NAME)
        close = self._root.tasks.named(CLOSE_TASK_NAME)

        def order(task: PublishToMavenRepository) -> None:
            if task.repository is None or task.repository.name != SONATYPE_REPOSITORY_NAME:
                return
            task.depends_on(initialize)
            close.must_run_after(task)

        project.tasks.with_type(PublishToMavenRepository).configure_each(order)
