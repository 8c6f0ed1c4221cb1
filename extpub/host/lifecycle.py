"""Lifecycle tasks: ``assemble``, ``check`` and ``build``."""

from __future__ import annotations

from extpub.build.plugins import Plugin
from extpub.build.project import Project
from extpub.build.tasks import Task

__all__ = ["LifecycleBasePlugin", "ASSEMBLE_TASK_NAME", "BUILD_TASK_NAME", "CHECK_TASK_NAME"]

ASSEMBLE_TASK_NAME = "assemble"
CHECK_TASK_NAME = "check"
BUILD_TASK_NAME = "build"


class LifecycleBasePlugin(Plugin):
    id = "lifecycle-base"

    def apply(self, project: Project) -> None:
        tasks = project.tasks

        def verification(task: Task) -> None:
            task.group = "verification"
            task.description = "Runs all checks."

        assemble = tasks.register(ASSEMBLE_TASK_NAME)
        check = tasks.register(CHECK_TASK_NAME, configure=verification)
        tasks.register(BUILD_TASK_NAME, configure=lambda t: t.depends_on(assemble, check))
