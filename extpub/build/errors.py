"""Exceptions raised by the build model.

Configuration errors are setup mistakes (plugins applied in the wrong order,
unknown task names) and abort configuration. Task failures are raised by task
actions and caught by the executor, which records them in the report.
"""

from __future__ import annotations

__all__ = ["ConfigurationError", "TaskExecutionError"]


class ConfigurationError(Exception):
    """The build was configured incorrectly."""


class TaskExecutionError(Exception):
    """A task action failed."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
