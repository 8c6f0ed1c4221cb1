"""Tasks and the per-project task container.

A task is a named unit of work owned by a project. During configuration,
plugins register tasks, wire dependencies between them and attach
``only_if`` predicates; the executor (``extpub.build.execution``) later walks
the resulting graph.

Cross-project references are expressed as ``TaskRef`` values, which are
resolved only when the graph is built. That lets a child project depend on a
root task before anything about the root is inspected.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, ExitStack
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from extpub.build.errors import ConfigurationError

if TYPE_CHECKING:
    from extpub.build.project import Build, Project

__all__ = [
    "Task",
    "TaskCollection",
    "TaskContainer",
    "TaskRef",
    "task_path",
]

type TaskAction = Callable[[Task], None]
type TaskPredicate = Callable[[Task], bool]
type TaskWrapper = Callable[[Task], AbstractContextManager[object]]
type TaskLike = Task | TaskRef | str


def task_path(project_path: str, name: str) -> str:
    """Build a task path: ``:publish`` on the root, ``:lib:publish`` elsewhere."""
    if project_path == ":":
        return f":{name}"
    return f"{project_path}:{name}"


@dataclass(frozen=True, slots=True)
class TaskRef:
    """Lazy handle to a task, resolved against a build when needed."""

    project_path: str
    name: str

    @property
    def path(self) -> str:
        return task_path(self.project_path, self.name)

    def resolve(self, build: Build) -> Task:
        return build.project(self.project_path).tasks.named(self.name)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True, slots=True)
class _OnlyIf:
    predicate: TaskPredicate
    reason: str | None


class Task:
    """Base task: an aggregate with no action of its own.

    Subclasses override ``run``. ``do_first``/``do_last`` add actions around it
    and ``around`` wraps the whole execution in a context manager.
    """

    def __init__(self, name: str, project: Project) -> None:
        self.name = name
        self.project = project
        self.enabled = True
        self.group: str | None = None
        self.description: str | None = None
        self._dependencies: list[TaskRef] = []
        self._must_run_after: list[TaskRef] = []
        self._only_if: list[_OnlyIf] = []
        self._first: list[TaskAction] = []
        self._last: list[TaskAction] = []
        self._wrappers: list[TaskWrapper] = []

    @property
    def path(self) -> str:
        return task_path(self.project.path, self.name)

    @property
    def ref(self) -> TaskRef:
        return TaskRef(self.project.path, self.name)

    @property
    def dependencies(self) -> tuple[TaskRef, ...]:
        return tuple(self._dependencies)

    @property
    def must_run_after_refs(self) -> tuple[TaskRef, ...]:
        return tuple(self._must_run_after)

    def depends_on(self, *tasks: TaskLike) -> None:
        for task in tasks:
            ref = self._to_ref(task)
            if ref not in self._dependencies:
                self._dependencies.append(ref)

    def must_run_after(self, *tasks: TaskLike) -> None:
        """Order this task after others, without pulling them into the graph."""
        for task in tasks:
            ref = self._to_ref(task)
            if ref not in self._must_run_after:
                self._must_run_after.append(ref)

    def only_if(self, predicate: TaskPredicate, reason: str | None = None) -> None:
        self._only_if.append(_OnlyIf(predicate, reason))

    def skip_reason(self) -> str | None:
        """Return why this task would be skipped, or None if it should run.

        Predicates are evaluated in registration order; the first false one wins.
        """
        for only_if in self._only_if:
            if not only_if.predicate(self):
                return only_if.reason or "only_if predicate was false"
        return None

    def do_first(self, action: TaskAction) -> None:
        self._first.insert(0, action)

    def do_last(self, action: TaskAction) -> None:
        self._last.append(action)

    def around(self, wrapper: TaskWrapper) -> None:
        self._wrappers.append(wrapper)

    def execute(self) -> None:
        with ExitStack() as stack:
            for wrapper in self._wrappers:
                stack.enter_context(wrapper(self))
            for action in self._first:
                action(self)
            self.run()
            for action in self._last:
                action(self)

    def run(self) -> None:
        """Task action. Aggregates do nothing."""

    def _to_ref(self, task: TaskLike) -> TaskRef:
        if isinstance(task, Task):
            return task.ref
        if isinstance(task, TaskRef):
            return task
        return TaskRef(self.project.path, task)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"


class TaskContainer:
    """Tasks of one project, keyed by name."""

    def __init__(self, project: Project) -> None:
        self._project = project
        self._tasks: dict[str, Task] = {}
        self._rules: list[tuple[type[Task], TaskAction]] = []

    def register[T: Task](
        self,
        name: str,
        task_type: type[T] = Task,
        configure: Callable[[T], None] | None = None,
    ) -> T:
        """Create a task and run matching ``configure_each`` rules on it."""
        if self._project.build.finalized:
            raise ConfigurationError(
                f"Cannot register task '{name}' in project '{self._project.path}': "
                "configuration has already finished"
            )
        if name in self._tasks:
            raise ConfigurationError(
                f"Cannot add task '{name}' as a task with that name already exists "
                f"in project '{self._project.path}'"
            )

        task = task_type(name, self._project)
        self._tasks[name] = task
        if configure is not None:
            configure(task)
        for rule_type, action in list(self._rules):
            if isinstance(task, rule_type):
                action(task)
        return task

    def named(self, name: str) -> Task:
        task = self._tasks.get(name)
        if task is None:
            raise ConfigurationError(
                f"Task with name '{name}' not found in project '{self._project.path}'"
            )
        return task

    def find(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def with_type[T: Task](self, task_type: type[T]) -> TaskCollection[T]:
        return TaskCollection(self, task_type)

    def names(self) -> list[str]:
        return list(self._tasks)

    def _add_rule[T: Task](self, task_type: type[T], action: Callable[[T], None]) -> None:
        rule = cast(TaskAction, action)
        for task in list(self._tasks.values()):
            if isinstance(task, task_type):
                rule(task)
        self._rules.append((task_type, rule))

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)


class TaskCollection[T: Task]:
    """Live view of the tasks of one type."""

    def __init__(self, container: TaskContainer, task_type: type[T]) -> None:
        self._container = container
        self._task_type = task_type

    def configure_each(self, action: Callable[[T], None]) -> None:
        """Run ``action`` on every matching task, now and when registered later."""
        self._container._add_rule(self._task_type, action)  # pyright: ignore[reportPrivateUsage]

    def __iter__(self) -> Iterator[T]:
        for task in self._container:
            if isinstance(task, self._task_type):
                yield task
