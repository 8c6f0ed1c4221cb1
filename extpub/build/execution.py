"""Simulated task execution.

``execute`` turns a list of requested task names into the dependency closure
of the build's task graph, orders it, and runs each task once:

- ``DISABLED`` when ``task.enabled`` is False,
- ``SKIPPED`` when an ``only_if`` predicate is false,
- ``EXECUTED`` when the action completed,
- ``FAILED`` when the action raised ``TaskExecutionError``; execution stops.

Skipping a task never skips its dependencies.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from graphlib import CycleError, TopologicalSorter

from extpub.build.errors import ConfigurationError, TaskExecutionError
from extpub.build.project import Build
from extpub.build.tasks import Task
from extpub.output.console import Style

__all__ = [
    "ExecutionReport",
    "TaskOutcome",
    "TaskResult",
    "execute",
    "resolve_requested",
    "task_graph",
]


class TaskOutcome(Enum):
    EXECUTED = auto()
    SKIPPED = auto()
    DISABLED = auto()
    FAILED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class TaskResult:
    path: str
    outcome: TaskOutcome
    message: str | None = None


def _empty_results() -> list[TaskResult]:
    return []


@dataclass
class ExecutionReport:
    """Outcome of every task that was reached, in execution order."""

    results: list[TaskResult] = field(default_factory=_empty_results)

    @property
    def failure(self) -> TaskResult | None:
        for result in self.results:
            if result.outcome is TaskOutcome.FAILED:
                return result
        return None

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def paths(self) -> list[str]:
        return [r.path for r in self.results]

    @property
    def executed(self) -> list[str]:
        return [r.path for r in self.results if r.outcome is TaskOutcome.EXECUTED]

    @property
    def skipped(self) -> list[str]:
        return [
            r.path
            for r in self.results
            if r.outcome in (TaskOutcome.SKIPPED, TaskOutcome.DISABLED)
        ]

    def outcome(self, path: str) -> TaskOutcome | None:
        for result in self.results:
            if result.path == path:
                return result.outcome
        return None


def resolve_requested(build: Build, requested: Sequence[str]) -> list[Task]:
    """Resolve requested names to tasks.

    An absolute path (``:lib:publish``) selects one task. A bare name selects
    that task in every project that has it.
    """
    tasks: list[Task] = []
    for name in requested:
        if name.startswith(":"):
            tasks.append(build.task(name))
            continue

        matches = [p.tasks.named(name) for p in build.projects() if name in p.tasks]
        if not matches:
            raise ConfigurationError(
                f"Task '{name}' not found in root project '{build.root.name}' or its subprojects"
            )
        tasks.extend(matches)
    return tasks


def task_graph(build: Build, requested: Sequence[str]) -> list[Task]:
    """Return the requested tasks and their dependencies in execution order."""
    closure: dict[str, Task] = {}

    def visit(task: Task) -> None:
        if task.path in closure:
            return
        for ref in task.dependencies:
            visit(ref.resolve(build))
        closure[task.path] = task

    for task in resolve_requested(build, requested):
        visit(task)

    sorter: TopologicalSorter[str] = TopologicalSorter()
    for path, task in closure.items():
        predecessors = [ref.path for ref in task.dependencies]
        # must_run_after only orders tasks that are already in the graph.
        predecessors += [ref.path for ref in task.must_run_after_refs if ref.path in closure]
        sorter.add(path, *predecessors)

    try:
        order = list(sorter.static_order())
    except CycleError as e:
        cycle = " -> ".join(str(p) for p in e.args[1])
        raise ConfigurationError(f"Circular dependency between tasks: {cycle}") from e

    return [closure[path] for path in order]


def execute(build: Build, requested: Sequence[str]) -> ExecutionReport:
    """Run the requested tasks, finishing configuration first if needed."""
    if not build.finalized:
        build.evaluate()

    build.start_execution()
    console = build.console
    report = ExecutionReport()
    for task in task_graph(build, requested):
        if not task.enabled:
            console.print(f"> Task {task.path} SKIPPED (disabled)", Style.DIM)
            report.results.append(TaskResult(task.path, TaskOutcome.DISABLED, "disabled"))
            continue

        reason = task.skip_reason()
        if reason is not None:
            console.print(f"> Task {task.path} SKIPPED ({reason})", Style.DIM)
            report.results.append(TaskResult(task.path, TaskOutcome.SKIPPED, reason))
            continue

        console.print(f"> Task {task.path}")
        try:
            task.execute()
        except TaskExecutionError as e:
            console.error(f"Execution failed for task '{task.path}': {e.pretty()}")
            report.results.append(TaskResult(task.path, TaskOutcome.FAILED, e.pretty()))
            break
        report.results.append(TaskResult(task.path, TaskOutcome.EXECUTED))

    return report
