"""Build descriptions: a TOML file that declares a build to configure.

    [root]
    name = "acme-libs"
    group = "com.acme"
    version = "1.2.3"
    plugins = ["external-publish"]

    [[projects]]
    name = "core"
    plugins = ["external-publish-jar"]

    [[projects]]
    name = "bom"
    publications = ["bom"]

    [properties]          # optional build properties
    __TESTING = "true"

    [publishing]          # optional, see extpub.core.config

Subprojects inherit the root's group and version unless they set their own.
Listing ``publications`` applies ``external-publish-custom`` to the project.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from extpub.build.project import Build, Project
from extpub.core.config import ConfigError, PublishSettings, parse_toml, settings_from_table
from extpub.core.result import Err, Ok, Result
from extpub.core.structured import StrDict, get_str, get_str_list, get_table, get_table_list
from extpub.output.console import ConsoleProtocol
from extpub.publish.plugins import ExternalPublishCustomPlugin, ExternalPublishingExtension, plugin_for_id

__all__ = [
    "BuildDescription",
    "ProjectDescription",
    "configure_build",
    "load_build_description",
    "parse_build_description",
]


@dataclass(frozen=True, slots=True)
class ProjectDescription:
    name: str
    version: str | None = None
    group: str | None = None
    description: str | None = None
    plugins: tuple[str, ...] = ()
    publications: tuple[str, ...] = ()


def _no_properties() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class BuildDescription:
    root: ProjectDescription
    projects: tuple[ProjectDescription, ...] = ()
    properties: dict[str, str] = field(default_factory=_no_properties)
    settings: PublishSettings = field(default_factory=PublishSettings)


def _parse_project(
    table: StrDict, where: str, path: Path | None
) -> Result[ProjectDescription, ConfigError]:
    name = get_str(table, "name")
    if name is None:
        return Err(ConfigError(f"{where}: missing 'name'", path=path))
    if ":" in name:
        return Err(ConfigError(f"{where}: project name must not contain ':': {name}", path=path))

    lists: dict[str, tuple[str, ...]] = {}
    for key in ("plugins", "publications"):
        if key not in table:
            lists[key] = ()
            continue
        values = get_str_list(table, key)
        if values is None:
            return Err(ConfigError(f"{where}: '{key}' must be a list of strings", path=path))
        lists[key] = tuple(values)

    unknown = [plugin_id for plugin_id in lists["plugins"] if plugin_for_id(plugin_id) is None]
    if unknown:
        return Err(ConfigError(f"{where}: unknown plugin id(s): {', '.join(unknown)}", path=path))

    return Ok(
        ProjectDescription(
            name=name,
            version=get_str(table, "version"),
            group=get_str(table, "group"),
            description=get_str(table, "description"),
            plugins=lists["plugins"],
            publications=lists["publications"],
        )
    )


def parse_build_description(
    data: Mapping[str, object], path: Path | None = None
) -> Result[BuildDescription, ConfigError]:
    root_table = get_table(data, "root")
    if root_table is None:
        return Err(ConfigError("missing [root] table", path=path))
    root = _parse_project(root_table, "[root]", path)
    if isinstance(root, Err):
        return root

    projects: list[ProjectDescription] = []
    if "projects" in data:
        tables = get_table_list(data, "projects")
        if tables is None:
            return Err(ConfigError("'projects' must be an array of tables", path=path))
        for i, table in enumerate(tables):
            project = _parse_project(table, f"[[projects]] #{i + 1}", path)
            if isinstance(project, Err):
                return project
            projects.append(project.value)

    names = [p.name for p in projects]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        return Err(ConfigError(f"duplicate project name(s): {', '.join(duplicates)}", path=path))

    properties: dict[str, str] = {}
    props_table = get_table(data, "properties")
    if props_table is None and "properties" in data:
        return Err(ConfigError("[properties] must be a table", path=path))
    for key, value in (props_table or {}).items():
        if not isinstance(value, str):
            return Err(ConfigError(f"[properties] {key} must be a string", path=path))
        properties[key] = value

    settings = settings_from_table(data, path)
    if isinstance(settings, Err):
        return settings

    return Ok(
        BuildDescription(
            root=root.value,
            projects=tuple(projects),
            properties=properties,
            settings=settings.value,
        )
    )


def load_build_description(path: Path) -> Result[BuildDescription, ConfigError]:
    """Load a build description file."""
    result = parse_toml(path)
    if isinstance(result, Err):
        return result
    return parse_build_description(result.value, path)


def _script(description: ProjectDescription) -> Callable[[Project], None]:
    def configure(project: Project) -> None:
        if description.version is not None:
            project.version = description.version
        if description.group is not None:
            project.group = description.group
        if description.description is not None:
            project.description = description.description

        for plugin_id in description.plugins:
            plugin = plugin_for_id(plugin_id)
            if plugin is not None:
                project.plugins.apply(plugin)

        if description.publications:
            project.plugins.apply(ExternalPublishCustomPlugin)
            extension = project.extensions.get_by_type(ExternalPublishingExtension)
            for name in description.publications:
                extension.publication(name)

    return configure


def configure_build(
    description: BuildDescription,
    root_dir: Path,
    *,
    environ: Mapping[str, str] | None = None,
    console: ConsoleProtocol | None = None,
) -> Build:
    """Create and evaluate the described build.

    Raises:
        ConfigurationError: When the plugins are applied in an invalid order.
    """
    build = Build(
        root_dir,
        description.root.name,
        environ=environ,
        properties=description.properties,
        console=console,
    )
    build.registry.register(description.settings)

    scripts = {":": _script(description.root)}
    root = build.root
    if description.root.version is not None:
        root.version = description.root.version
    if description.root.group is not None:
        root.group = description.root.group
    for project_description in description.projects:
        child = root.create_child(project_description.name)
        scripts[child.path] = _script(project_description)

    build.evaluate(scripts)
    return build
