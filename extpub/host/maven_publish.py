"""Maven publications, repositories and their publish tasks.

``MavenPublishPlugin`` adds the ``publishing`` extension. Every publication
gets a POM generation task and a module metadata task; every
publication x repository pair gets a ``PublishToMavenRepository`` task, and
``publish`` depends on all of them through per-repository aggregates:

    publish
      -> publishAllPublicationsToSonatypeRepository
           -> publishMavenPublicationToSonatypeRepository
                -> generatePomFileForMavenPublication
                -> generateMetadataFileForMavenPublication

Uploading is simulated: the publish task reports what it would send where.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from extpub.build.errors import ConfigurationError, TaskExecutionError
from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.build.tasks import Task

if TYPE_CHECKING:
    from extpub.build.tasks import TaskRef

__all__ = [
    "Developer",
    "GenerateMavenPom",
    "GenerateModuleMetadata",
    "License",
    "MavenArtifact",
    "MavenArtifactRepository",
    "MavenPublication",
    "MavenPublishPlugin",
    "NamedContainer",
    "Pom",
    "PublishToMavenRepository",
    "PublishingExtension",
    "Scm",
    "PUBLISH_TASK_NAME",
    "capitalize",
]

PUBLISH_TASK_NAME = "publish"

_POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"


def capitalize(name: str) -> str:
    """Upper-case the first character only (``maven`` -> ``Maven``, ``myLib`` -> ``MyLib``)."""
    return name[:1].upper() + name[1:]


@dataclass(frozen=True, slots=True)
class License:
    name: str
    url: str


@dataclass(frozen=True, slots=True)
class Developer:
    id: str
    name: str
    organization_url: str | None = None


@dataclass(frozen=True, slots=True)
class Scm:
    url: str
    connection: str | None = None
    tag: str | None = None


type PomHook = Callable[[Pom], None]


def _hooks() -> list[PomHook]:
    return []


@dataclass
class Pom:
    """Descriptor metadata of one publication.

    Hooks contributed by metadata plugins run once, right before the POM is
    first rendered, so they see the final project state.
    """

    name: str | None = None
    description: str | None = None
    url: str | None = None
    licenses: list[License] = field(default_factory=list)
    developers: list[Developer] = field(default_factory=list)
    scm: Scm | None = None
    properties: dict[str, str] = field(default_factory=dict)
    _hooks: list[PomHook] = field(default_factory=_hooks, repr=False)
    _resolved: bool = field(default=False, repr=False)

    def when_generated(self, hook: PomHook) -> None:
        self._hooks.append(hook)

    def resolve(self) -> Pom:
        if not self._resolved:
            self._resolved = True
            for hook in self._hooks:
                hook(self)
        return self


@dataclass(frozen=True, slots=True)
class MavenArtifact:
    classifier: str | None = None
    extension: str = "jar"

    def file_name(self, artifact_id: str, version: str) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{artifact_id}-{version}{suffix}.{self.extension}"


class MavenPublication:
    """A named artifact set plus its POM.

    Coordinates default to the owning project's group, name and version and
    are read when needed, not when the publication is created.
    """

    def __init__(self, name: str, project: Project) -> None:
        self.name = name
        self.project = project
        self.group_id: str | None = None
        self.artifact_id: str | None = None
        self.version: str | None = None
        self.component: str | None = None
        self.artifacts: list[MavenArtifact] = []
        self.pom = Pom()

    @property
    def resolved_group_id(self) -> str:
        return self.group_id or self.project.group or self.project.root.name

    @property
    def resolved_artifact_id(self) -> str:
        return self.artifact_id or self.project.name

    @property
    def resolved_version(self) -> str:
        return self.version or self.project.version

    @property
    def coordinates(self) -> str:
        return f"{self.resolved_group_id}:{self.resolved_artifact_id}:{self.resolved_version}"

    def from_component(self, component: str) -> None:
        self.component = component

    def artifact(self, classifier: str | None = None, extension: str = "jar") -> MavenArtifact:
        artifact = MavenArtifact(classifier=classifier, extension=extension)
        if artifact not in self.artifacts:
            self.artifacts.append(artifact)
        return artifact

    def file_names(self) -> list[str]:
        artifacts = list(self.artifacts)
        if self.component is not None and MavenArtifact() not in artifacts:
            artifacts.insert(0, MavenArtifact())
        names = [a.file_name(self.resolved_artifact_id, self.resolved_version) for a in artifacts]
        names.append(f"{self.resolved_artifact_id}-{self.resolved_version}.pom")
        return names

    def __repr__(self) -> str:
        return f"MavenPublication({self.name!r})"


class NamedContainer[T]:
    """Insertion-ordered objects keyed by name, with creation callbacks."""

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._items: dict[str, T] = {}
        self._on_added: list[Callable[[T], None]] = []

    def add(self, name: str, item: T) -> T:
        if name in self._items:
            raise ConfigurationError(f"Cannot add a {self._kind} with name '{name}' as one already exists")
        self._items[name] = item
        for callback in list(self._on_added):
            callback(item)
        return item

    def maybe_create(self, name: str, factory: Callable[[str], T]) -> T:
        existing = self._items.get(name)
        if existing is not None:
            return existing
        return self.add(name, factory(name))

    def find(self, name: str) -> T | None:
        return self._items.get(name)

    def get(self, name: str) -> T:
        item = self._items.get(name)
        if item is None:
            raise ConfigurationError(f"{capitalize(self._kind)} with name '{name}' not found")
        return item

    def when_added(self, callback: Callable[[T], None]) -> None:
        """Run ``callback`` for every item, existing and future."""
        for item in list(self._items.values()):
            callback(item)
        self._on_added.append(callback)

    def names(self) -> list[str]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)


class MavenArtifactRepository:
    """A remote Maven repository. ``url`` may be computed at upload time."""

    def __init__(self, name: str, url: str | Callable[[], str]) -> None:
        self.name = name
        self._url = url

    @property
    def url(self) -> str:
        if callable(self._url):
            return self._url()
        return self._url

    def __repr__(self) -> str:
        return f"MavenArtifactRepository({self.name!r})"


class PublishingExtension:
    def __init__(self, project: Project) -> None:
        self._project = project
        self.publications: NamedContainer[MavenPublication] = NamedContainer("publication")
        self.repositories: NamedContainer[MavenArtifactRepository] = NamedContainer("repository")

    def publication(self, name: str) -> MavenPublication:
        """Create the publication ``name``, or return it if it exists."""
        return self.publications.maybe_create(name, lambda n: MavenPublication(n, self._project))

    def repository(self, name: str, url: str | Callable[[], str]) -> MavenArtifactRepository:
        return self.repositories.add(name, MavenArtifactRepository(name, url))


def render_pom(publication: MavenPublication) -> str:
    """Render the POM of ``publication`` as XML."""
    pom = publication.pom.resolve()
    ET.register_namespace("", _POM_NAMESPACE)
    root = ET.Element(f"{{{_POM_NAMESPACE}}}project")

    def sub(parent: ET.Element, tag: str, text: str | None) -> None:
        if text is not None:
            ET.SubElement(parent, f"{{{_POM_NAMESPACE}}}{tag}").text = text

    sub(root, "modelVersion", "4.0.0")
    sub(root, "groupId", publication.resolved_group_id)
    sub(root, "artifactId", publication.resolved_artifact_id)
    sub(root, "version", publication.resolved_version)
    sub(root, "name", pom.name)
    sub(root, "description", pom.description)
    sub(root, "url", pom.url)

    if pom.licenses:
        licenses = ET.SubElement(root, f"{{{_POM_NAMESPACE}}}licenses")
        for lic in pom.licenses:
            el = ET.SubElement(licenses, f"{{{_POM_NAMESPACE}}}license")
            sub(el, "name", lic.name)
            sub(el, "url", lic.url)

    if pom.developers:
        developers = ET.SubElement(root, f"{{{_POM_NAMESPACE}}}developers")
        for dev in pom.developers:
            el = ET.SubElement(developers, f"{{{_POM_NAMESPACE}}}developer")
            sub(el, "id", dev.id)
            sub(el, "name", dev.name)
            sub(el, "organizationUrl", dev.organization_url)

    if pom.scm is not None:
        scm = ET.SubElement(root, f"{{{_POM_NAMESPACE}}}scm")
        sub(scm, "url", pom.scm.url)
        sub(scm, "connection", pom.scm.connection)
        sub(scm, "tag", pom.scm.tag)

    if pom.properties:
        props = ET.SubElement(root, f"{{{_POM_NAMESPACE}}}properties")
        for key, value in sorted(pom.properties.items()):
            sub(props, key, value)

    return ET.tostring(root, encoding="unicode")


class GenerateMavenPom(Task):
    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.publication: MavenPublication | None = None
        self.output: str | None = None

    def run(self) -> None:
        if self.publication is None:
            raise TaskExecutionError(f"{self.path} has no publication")
        self.output = render_pom(self.publication)
        self.project.console.info(f"Generated POM for {self.publication.coordinates}")


class GenerateModuleMetadata(Task):
    """Writes the Gradle-style module metadata document next to the POM."""

    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.publication: MavenPublication | None = None

    def run(self) -> None:
        if self.publication is not None:
            self.project.console.info(f"Generated module metadata for {self.publication.coordinates}")


class PublishToMavenRepository(Task):
    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.publication: MavenPublication | None = None
        self.repository: MavenArtifactRepository | None = None

    def run(self) -> None:
        if self.publication is None or self.repository is None:
            raise TaskExecutionError(f"{self.path} has no publication or repository")
        files = ", ".join(self.publication.file_names())
        self.project.console.info(
            f"Publishing {self.publication.coordinates} to {self.repository.name} "
            f"({self.repository.url}): {files}"
        )


class MavenPublishPlugin(Plugin):
    id = "maven-publish"

    def apply(self, project: Project) -> None:
        self._project = project
        self._aggregates: dict[str, TaskRef] = {}
        publishing = project.extensions.add("publishing", PublishingExtension(project))

        def describe(task: Task) -> None:
            task.group = "publishing"
            task.description = "Publishes all publications produced by this project."

        project.tasks.register(PUBLISH_TASK_NAME, configure=describe)
        self._publishing = publishing
        publishing.publications.when_added(self._publication_added)
        publishing.repositories.when_added(self._repository_added)

    def _publication_added(self, publication: MavenPublication) -> None:
        tasks = self._project.tasks
        cap = capitalize(publication.name)

        def pom(task: GenerateMavenPom) -> None:
            task.publication = publication

        def metadata(task: GenerateModuleMetadata) -> None:
            task.publication = publication

        tasks.register(f"generatePomFileFor{cap}Publication", GenerateMavenPom, pom)
        tasks.register(f"generateMetadataFileFor{cap}Publication", GenerateModuleMetadata, metadata)
        for repository in self._publishing.repositories:
            self._register_publish_task(publication, repository)

    def _repository_added(self, repository: MavenArtifactRepository) -> None:
        aggregate = self._project.tasks.register(
            f"publishAllPublicationsTo{capitalize(repository.name)}Repository"
        )
        self._aggregates[repository.name] = aggregate.ref
        self._project.tasks.named(PUBLISH_TASK_NAME).depends_on(aggregate)
        for publication in self._publishing.publications:
            self._register_publish_task(publication, repository)

    def _register_publish_task(
        self, publication: MavenPublication, repository: MavenArtifactRepository
    ) -> None:
        cap = capitalize(publication.name)

        def configure(task: PublishToMavenRepository) -> None:
            task.group = "publishing"
            task.publication = publication
            task.repository = repository
            task.depends_on(
                f"generatePomFileFor{cap}Publication",
                f"generateMetadataFileFor{cap}Publication",
            )

        task = self._project.tasks.register(
            f"publish{cap}PublicationTo{capitalize(repository.name)}Repository",
            PublishToMavenRepository,
            configure,
        )
        self._project.tasks.named(self._aggregates[repository.name].name).depends_on(task)
