"""In-process model of a multi-project build.

This is the host the publishing plugins configure: a project tree, named
tasks with dependencies, plugins and extensions, a two-phase configuration
protocol and a simulated executor.
"""

from extpub.build.errors import ConfigurationError, TaskExecutionError
from extpub.build.execution import ExecutionReport, TaskOutcome, TaskResult, execute
from extpub.build.plugins import ExtensionContainer, Plugin, PluginManager
from extpub.build.project import Build, BuildPhase, Project
from extpub.build.registry import ServiceRegistry
from extpub.build.tasks import Task, TaskContainer, TaskRef

__all__ = [
    # errors
    "ConfigurationError",
    "TaskExecutionError",
    # execution
    "ExecutionReport",
    "TaskOutcome",
    "TaskResult",
    "execute",
    # plugins
    "ExtensionContainer",
    "Plugin",
    "PluginManager",
    # project
    "Build",
    "BuildPhase",
    "Project",
    # registry
    "ServiceRegistry",
    # tasks
    "Task",
    "TaskContainer",
    "TaskRef",
]
