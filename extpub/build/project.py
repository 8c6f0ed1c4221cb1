"""Builds and projects.

A ``Build`` owns a tree of projects with a distinguished root, the process
environment and build properties, a console, and a typed service registry.

Configuration is an explicit two-phase protocol driven by ``Build.evaluate``:

1. every project's configuration script runs, root first; plugins declare
   publications, tasks and dependencies;
2. callbacks registered with ``Project.defer`` run, once every phase-1
   declaration of every project is known.

After phase 2 the build is finalized and no more tasks may be registered.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Mapping
from enum import Enum, auto
from pathlib import Path

from extpub.build.errors import ConfigurationError
from extpub.build.plugins import ExtensionContainer, PluginManager
from extpub.build.registry import ServiceRegistry
from extpub.build.tasks import Task, TaskContainer, TaskRef
from extpub.core.env import EnvironmentVariables
from extpub.output.console import ConsoleProtocol, RichConsole

__all__ = ["Build", "BuildPhase", "Project", "UNSPECIFIED_VERSION"]

UNSPECIFIED_VERSION = "unspecified"

type ProjectAction = Callable[[Project], None]


class BuildPhase(Enum):
    CONFIGURING = auto()
    DEFERRED = auto()
    FINALIZED = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Project:
    """A node of the project tree."""

    def __init__(
        self,
        build: Build,
        name: str,
        parent: Project | None,
        project_dir: Path,
    ) -> None:
        if not name or ":" in name:
            raise ValueError(f"Invalid project name: {name!r}")
        self.build = build
        self.name = name
        self.parent = parent
        self.project_dir = project_dir
        self.version = UNSPECIFIED_VERSION
        self.group: str | None = None
        self.description: str | None = None
        self.tasks = TaskContainer(self)
        self.plugins = PluginManager(self)
        self.extensions = ExtensionContainer(self)
        self._children: dict[str, Project] = {}
        self._deferred: list[ProjectAction] = []

    @property
    def path(self) -> str:
        if self.parent is None:
            return ":"
        if self.parent.parent is None:
            return f":{self.name}"
        return f"{self.parent.path}:{self.name}"

    @property
    def root(self) -> Project:
        return self.build.root

    @property
    def is_root(self) -> bool:
        return self is self.build.root

    @property
    def console(self) -> ConsoleProtocol:
        return self.build.console

    @property
    def env(self) -> EnvironmentVariables:
        return self.build.env

    @property
    def children(self) -> tuple[Project, ...]:
        return tuple(self._children.values())

    def create_child(self, name: str, project_dir: Path | None = None) -> Project:
        if name in self._children:
            raise ConfigurationError(f"Project '{name}' already exists under '{self.path}'")
        child = Project(self.build, name, self, project_dir or self.project_dir / name)
        child.version = self.version
        child.group = self.group
        self._children[name] = child
        self.build._project_added(child)  # pyright: ignore[reportPrivateUsage]
        return child

    def defer(self, callback: ProjectAction) -> None:
        """Run ``callback`` in phase 2, after all projects are configured."""
        if self.build.finalized:
            raise ConfigurationError(
                f"Cannot defer configuration of project '{self.path}': the build is finalized"
            )
        self._deferred.append(callback)

    def task_ref(self, name: str) -> TaskRef:
        return TaskRef(self.path, name)

    def all_projects(self) -> Iterator[Project]:
        """This project and all its descendants, parents before children."""
        yield self
        for child in self._children.values():
            yield from child.all_projects()

    def _run_deferred(self) -> bool:
        if not self._deferred:
            return False
        pending, self._deferred = self._deferred, []
        for callback in pending:
            callback(self)
        return True

    def __repr__(self) -> str:
        return f"Project({self.path!r})"


class Build:
    """One configuration of a multi-project build."""

    def __init__(
        self,
        root_dir: Path,
        root_name: str = "root",
        *,
        environ: Mapping[str, str] | None = None,
        properties: Mapping[str, str] | None = None,
        console: ConsoleProtocol | None = None,
    ) -> None:
        self.root_dir = root_dir
        self.environ: dict[str, str] = dict(os.environ if environ is None else environ)
        self.properties: dict[str, str] = dict(properties or {})
        self.console: ConsoleProtocol = console if console is not None else RichConsole()
        self.registry = ServiceRegistry()
        self.phase = BuildPhase.CONFIGURING
        self._project_actions: list[ProjectAction] = []
        self._execution_actions: list[Callable[[], None]] = []
        self.root = Project(self, root_name, None, root_dir)

    @property
    def env(self) -> EnvironmentVariables:
        return EnvironmentVariables(self.environ, self.properties)

    @property
    def finalized(self) -> bool:
        return self.phase is BuildPhase.FINALIZED

    def projects(self) -> Iterator[Project]:
        return self.root.all_projects()

    def each_project(self, action: ProjectAction) -> None:
        """Run ``action`` for every existing project and every project created later."""
        for project in list(self.projects()):
            action(project)
        self._project_actions.append(action)

    def before_execution(self, action: Callable[[], None]) -> None:
        """Run ``action`` at the start of every execution of this build."""
        self._execution_actions.append(action)

    def start_execution(self) -> None:
        for action in self._execution_actions:
            action()

    def find_project(self, path: str) -> Project | None:
        if path == ":":
            return self.root
        for project in self.projects():
            if project.path == path:
                return project
        return None

    def project(self, path: str) -> Project:
        project = self.find_project(path)
        if project is None:
            raise ConfigurationError(f"Project with path '{path}' could not be found")
        return project

    def task(self, path: str) -> Task:
        """Look up a task by absolute path (``:publish``, ``:lib:publish``)."""
        if not path.startswith(":") or path == ":":
            raise ConfigurationError(f"Not an absolute task path: '{path}'")
        project_path, _, name = path.rpartition(":")
        return self.project(project_path or ":").tasks.named(name)

    def evaluate(self, scripts: Mapping[str, ProjectAction] | None = None) -> None:
        """Configure every project and finalize the build.

        Args:
            scripts: Configuration scripts keyed by project path; each runs
                once in phase 1.
        """
        if self.phase is not BuildPhase.CONFIGURING:
            raise ConfigurationError(f"The build has already been evaluated (phase: {self.phase})")

        for project in list(self.projects()):
            script = (scripts or {}).get(project.path)
            if script is not None:
                script(project)

        self.phase = BuildPhase.DEFERRED
        # Deferred callbacks may defer further work; drain until quiet.
        while any([project._run_deferred() for project in list(self.projects())]):
            pass

        self.phase = BuildPhase.FINALIZED

    def _project_added(self, project: Project) -> None:
        for action in list(self._project_actions):
            action(project)
