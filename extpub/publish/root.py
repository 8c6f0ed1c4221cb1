"""Build-wide publishing settings and the release decision.

``RootPublishCoordinator`` is applied once, to the root project. It configures
the staging plugin (timeouts, host URLs and credentials from the
environment), guards opening a staging repository behind the pre-release
checks and the tag-build signal, and tells each project which task finishes
a release, if any.
"""

from __future__ import annotations

from contextlib import AbstractContextManager

from extpub.build.errors import ConfigurationError
from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.build.tasks import Task, TaskRef
from extpub.core.config import PublishSettings
from extpub.core.env import EnvironmentVariables
from extpub.host.staging import (
    CLOSE_AND_RELEASE_TASK_NAME,
    CLOSE_TASK_NAME,
    INITIALIZE_TASK_NAME,
    NexusPublishExtension,
    NexusRepository,
    NexusStagingPlugin,
)
from extpub.publish.checks import CheckSigningKeyTask, CheckVersionTask
from extpub.publish.environment import is_fork, is_tag_build
from extpub.publish.keepalive import keep_alive

__all__ = [
    "CHECK_SIGNING_KEY_TASK_NAME",
    "CHECK_VERSION_TASK_NAME",
    "RootPublishCoordinator",
]

CHECK_SIGNING_KEY_TASK_NAME = "checkSigningKey"
CHECK_VERSION_TASK_NAME = "checkVersion"

NEXUS_URL_VARIABLE = "SONATYPE_NEXUS_URL"
SNAPSHOT_REPO_URL_VARIABLE = "SONATYPE_SNAPSHOT_REPO_URL"
USERNAME_VARIABLE = "SONATYPE_USERNAME"
PASSWORD_VARIABLE = "SONATYPE_PASSWORD"


class RootPublishCoordinator(Plugin):
    id = "external-publish"

    def __init__(self) -> None:
        self._root: Project | None = None

    def apply(self, project: Project) -> None:
        if not project.is_root:
            raise ConfigurationError(
                f"The {type(self).__name__} plugin must be applied on the root project, "
                f"not on '{project.path}'"
            )
        self._root = project

        settings = project.build.registry.get(PublishSettings) or PublishSettings()
        project.plugins.apply(NexusStagingPlugin)
        extension = project.extensions.get_by_type(NexusPublishExtension)
        extension.connect_timeout = settings.staging_timeout
        extension.client_timeout = settings.staging_timeout
        extension.sonatype(lambda repo: _configure_repository(repo, project.env))

        tasks = project.tasks
        check_signing_key = tasks.register(
            CHECK_SIGNING_KEY_TASK_NAME,
            CheckSigningKeyTask,
            lambda t: t.only_if(lambda _: not is_fork(project), "forked builds have no signing key"),
        )
        check_version = tasks.register(CHECK_VERSION_TASK_NAME, CheckVersionTask)

        initialize = tasks.named(INITIALIZE_TASK_NAME)
        initialize.only_if(lambda _: is_tag_build(project), "not a tag build")
        initialize.depends_on(check_signing_key, check_version)

        tasks.named(CLOSE_TASK_NAME).around(_keep_alive_while_closing)

        project.build.registry.register(self)

    def finishing_task(self) -> TaskRef | None:
        """The task that completes a release, or None when this build must not release."""
        if self._root is None:
            raise ConfigurationError(
                f"The {type(self).__name__} plugin has not been applied to a root project"
            )
        if not is_tag_build(self._root):
            return None
        return self._root.task_ref(CLOSE_AND_RELEASE_TASK_NAME)


def _configure_repository(repo: NexusRepository, env: EnvironmentVariables) -> None:
    nexus_url = env.get(NEXUS_URL_VARIABLE)
    snapshot_repository_url = env.get(SNAPSHOT_REPO_URL_VARIABLE)

    if nexus_url is not None:
        repo.nexus_url = nexus_url
    if snapshot_repository_url is not None:
        repo.snapshot_repository_url = snapshot_repository_url

    repo.username = env.get(USERNAME_VARIABLE)
    repo.password = env.get(PASSWORD_VARIABLE)


def _keep_alive_while_closing(task: Task) -> AbstractContextManager[None]:
    return keep_alive(task.project.console, message="Still closing the staging repository")
