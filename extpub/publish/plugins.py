"""Ready-made publishing plugins for common project shapes, and their ids."""

from __future__ import annotations

from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.host.maven_publish import MavenPublication
from extpub.publish.gate import ProjectPublishGate, PublicationConfigurer
from extpub.publish.root import RootPublishCoordinator

__all__ = [
    "ExternalPublishCustomPlugin",
    "ExternalPublishJarPlugin",
    "ExternalPublishingExtension",
    "PLUGINS",
    "plugin_for_id",
]


class ExternalPublishJarPlugin(Plugin):
    """Publishes the project's jar with the sources and javadoc jars the host requires."""

    id = "external-publish-jar"

    def apply(self, project: Project) -> None:
        gate = ProjectPublishGate.apply_to(project)

        def jar(publication: MavenPublication) -> None:
            publication.from_component("java")
            publication.artifact(classifier="sources")
            publication.artifact(classifier="javadoc")

        gate.add_publication("maven", jar)


class ExternalPublishingExtension:
    """Build-script entry point for publications the project defines itself."""

    def __init__(self, gate: ProjectPublishGate) -> None:
        self._gate = gate

    def publication(self, name: str, configure: PublicationConfigurer | None = None) -> MavenPublication:
        return self._gate.add_publication(name, configure)


class ExternalPublishCustomPlugin(Plugin):
    id = "external-publish-custom"

    def apply(self, project: Project) -> None:
        gate = ProjectPublishGate.apply_to(project)
        project.extensions.add("external_publishing", ExternalPublishingExtension(gate))


PLUGINS: dict[str, type[Plugin]] = {
    plugin.id: plugin
    for plugin in (
        RootPublishCoordinator,
        ProjectPublishGate,
        ExternalPublishJarPlugin,
        ExternalPublishCustomPlugin,
    )
}


def plugin_for_id(plugin_id: str) -> type[Plugin] | None:
    return PLUGINS.get(plugin_id)
