"""Signing of publications.

``SigningExtension.sign(publication)`` registers a ``sign<Pub>Publication``
task and makes every publish task of that publication depend on it. The
signature itself is simulated.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from extpub.build.errors import TaskExecutionError
from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.build.tasks import Task
from extpub.host.maven_publish import MavenPublication, PublishToMavenRepository, capitalize

__all__ = ["InMemoryPgpKeys", "Sign", "SigningExtension", "SigningPlugin"]


@dataclass(frozen=True, slots=True)
class InMemoryPgpKeys:
    key_id: str
    key: str = field(repr=False)
    password: str = field(repr=False)


class Sign(Task):
    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.group = "signing"
        self.publication: MavenPublication | None = None
        self.signing: SigningExtension | None = None

    def run(self) -> None:
        keys = self.signing.keys if self.signing is not None else None
        if keys is None:
            raise TaskExecutionError(
                f"Cannot perform signing task '{self.path}' because it has no configured signatory",
                hint="configure in-memory PGP keys on the signing extension",
            )
        if self.publication is None:
            raise TaskExecutionError(f"{self.path} has no publication")
        files = len(self.publication.file_names())
        self.project.console.info(
            f"Signed {files} file(s) of {self.publication.coordinates} with key {keys.key_id}"
        )


class SigningExtension:
    def __init__(self, project: Project) -> None:
        self._project = project
        self.keys: InMemoryPgpKeys | None = None
        self._sign_tasks: dict[str, Sign] = {}

    def use_in_memory_pgp_keys(self, key_id: str, key: str, password: str) -> None:
        self.keys = InMemoryPgpKeys(key_id=key_id, key=key, password=password)

    @property
    def signed_publications(self) -> list[str]:
        return list(self._sign_tasks)

    def sign(self, publication: MavenPublication) -> Sign:
        """Sign ``publication``; signing the same publication again is a no-op."""
        existing = self._sign_tasks.get(publication.name)
        if existing is not None:
            return existing

        def configure(task: Sign) -> None:
            task.publication = publication
            task.signing = self

        sign_task = self._project.tasks.register(
            f"sign{capitalize(publication.name)}Publication", Sign, configure
        )
        self._sign_tasks[publication.name] = sign_task

        def depend(task: PublishToMavenRepository) -> None:
            if task.publication is publication:
                task.depends_on(sign_task)

        self._project.tasks.with_type(PublishToMavenRepository).configure_each(depend)
        return sign_task


class SigningPlugin(Plugin):
    id = "signing"

    def apply(self, project: Project) -> None:
        project.extensions.add("signing", SigningExtension(project))
