"""Per-project publishing policy.

``ProjectPublishGate`` decides which of a project's publications may reach
the artifact host. Only publications registered through ``add_publication``
are uploaded to the ``sonatype`` repository; publish tasks for any other
publication (plugin markers, test fixtures, whatever other plugins add) are
skipped for that repository and left alone for every other repository.

Applying the gate also links the project's ``publish`` task to the root's
release decision, stamps the license and developer blocks on every
registered publication, and signs it when a signing key is available.
"""

from __future__ import annotations

from collections.abc import Callable

from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.core.config import PublishSettings
from extpub.host.lifecycle import CHECK_TASK_NAME, LifecycleBasePlugin
from extpub.host.maven_metadata import (
    MavenBasePublishPlugin,
    MavenManifestPlugin,
    MavenScmPlugin,
    ScmInfoPlugin,
)
from extpub.host.maven_publish import (
    PUBLISH_TASK_NAME,
    Developer,
    GenerateModuleMetadata,
    License,
    MavenPublication,
    MavenPublishPlugin,
    PublishingExtension,
    PublishToMavenRepository,
)
from extpub.host.signing import SigningExtension, SigningPlugin
from extpub.host.staging import (
    CLOSE_TASK_NAME,
    PUBLISH_TO_SONATYPE_TASK_NAME,
    SONATYPE_REPOSITORY_NAME,
)
from extpub.publish.policy import ReleaseOverridePolicy
from extpub.publish.root import RootPublishCoordinator
from extpub.publish.signing_key import SigningCredential

__all__ = ["ProjectPublishGate", "ROOT_NOT_APPLIED_MESSAGE"]

ROOT_NOT_APPLIED_MESSAGE = (
    "The external-publish plugin must be applied to the root project "
    "*before* this plugin is evaluated"
)

# Not the bundled maven-publish convenience plugin: it also pulls in
# compile-only dependency handling, which we do not want.
_PUBLISHING_PLUGINS: tuple[type[Plugin], ...] = (
    MavenPublishPlugin,
    MavenBasePublishPlugin,
    MavenManifestPlugin,
    MavenScmPlugin,
    ScmInfoPlugin,
)

type PublicationConfigurer = Callable[[MavenPublication], None]


class ProjectPublishGate(Plugin):
    id = "external-publish-base"

    def __init__(self) -> None:
        self._publication_names: set[str] = set()

    @property
    def publication_names(self) -> frozenset[str]:
        return frozenset(self._publication_names)

    def apply(self, project: Project) -> None:
        self._project = project
        self._settings = project.build.registry.get(PublishSettings) or PublishSettings()

        for plugin in _PUBLISHING_PLUGINS:
            project.plugins.apply(plugin)
        self._link_with_root_project()
        self._always_run_publish_if_release_override()
        self._disable_other_publications_from_publishing_to_sonatype()
        self._disable_module_metadata()

        # The base publish plugin copies the project description over anything
        # set on the POM, so the host's required description goes on the project.
        if project.description is None:
            project.description = self._settings.default_description

    def _link_with_root_project(self) -> None:
        project = self._project
        if project.is_root:
            project.plugins.apply(RootPublishCoordinator)

        coordinator = project.build.registry.require(RootPublishCoordinator, ROOT_NOT_APPLIED_MESSAGE)

        finishing_task = coordinator.finishing_task()
        if finishing_task is not None:
            project.tasks.named(PUBLISH_TASK_NAME).depends_on(finishing_task)

    def is_allowed(self, task: PublishToMavenRepository) -> bool:
        """Whether ``task`` may upload: always, unless it targets the gated host."""
        if task.repository is None or task.repository.name != SONATYPE_REPOSITORY_NAME:
            return True
        return task.publication is not None and task.publication.name in self._publication_names

    def _disable_other_publications_from_publishing_to_sonatype(self) -> None:
        def gate(task: PublishToMavenRepository) -> None:
            task.only_if(self.is_allowed, "publication is not registered for external publishing")

        self._project.tasks.with_type(PublishToMavenRepository).configure_each(gate)

    def _always_run_publish_if_release_override(self) -> None:
        project = self._project
        policy = ReleaseOverridePolicy.for_build(project.build)

        # Exercise the real upload on the branches that change publishing itself,
        # without making every change wait for the artifact host.
        if not policy.applies(project.env):
            return

        def wire_check(p: Project) -> None:
            p.plugins.apply(LifecycleBasePlugin)
            # The aggregate rather than known publish tasks, so that publications
            # added by other plugins are exercised as well.
            p.tasks.named(CHECK_TASK_NAME).depends_on(
                p.task_ref(PUBLISH_TO_SONATYPE_TASK_NAME),
                p.root.task_ref(CLOSE_TASK_NAME),
            )

        project.defer(wire_check)

    def _disable_module_metadata(self) -> None:
        # Consumers should resolve plain POMs only.
        def disable(task: GenerateModuleMetadata) -> None:
            task.enabled = False

        self._project.tasks.with_type(GenerateModuleMetadata).configure_each(disable)

    def add_publication(
        self, name: str, configure: PublicationConfigurer | None = None
    ) -> MavenPublication:
        """Register ``name`` for external publishing and configure its publication.

        Calling this again with the same name configures the same publication.
        """
        self._publication_names.add(name)

        publishing = self._project.extensions.get_by_type(PublishingExtension)
        publication = publishing.publication(name)
        if configure is not None:
            configure(publication)

        pom = publication.pom
        license_ = License(name=self._settings.license.name, url=self._settings.license.url)
        developer = Developer(
            id=self._settings.developer.id,
            name=self._settings.developer.name,
            organization_url=self._settings.developer.organization_url,
        )
        # Once per publication, however often it is registered.
        if license_ not in pom.licenses:
            pom.licenses.append(license_)
        if developer not in pom.developers:
            pom.developers.append(developer)

        self._sign_publication(publication)
        return publication

    def _sign_publication(self, publication: MavenPublication) -> None:
        credential = SigningCredential.from_env(self._project.env)
        if credential is None:
            return

        self._project.plugins.apply(SigningPlugin)
        signing = self._project.extensions.get_by_type(SigningExtension)
        signing.use_in_memory_pgp_keys(credential.key_id, credential.key, credential.passphrase)
        signing.sign(publication)

    @classmethod
    def apply_to(cls, project: Project) -> ProjectPublishGate:
        return project.plugins.apply(cls)
