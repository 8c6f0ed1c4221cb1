"""Pre-release checks that must pass before a staging repository is opened."""

from __future__ import annotations

import re

from extpub.build.errors import TaskExecutionError
from extpub.build.project import UNSPECIFIED_VERSION, Project
from extpub.build.tasks import Task
from extpub.publish.signing_key import missing_signing_variables

__all__ = ["CheckSigningKeyTask", "CheckVersionTask", "version_problem"]

_RELEASE_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(-rc\d+)?(-\d+-g[0-9a-f]+)?$")


def version_problem(version: str) -> str | None:
    """Explain why ``version`` cannot be released, or return None if it can."""
    if version == UNSPECIFIED_VERSION:
        return "the project version is unspecified"
    if version.endswith(".dirty"):
        return f"version {version} was computed from a dirty working tree"
    if _RELEASE_VERSION_RE.match(version) is None:
        return f"version {version} is not of the form X.Y.Z[-rcN][-N-gHASH]"
    return None


class CheckSigningKeyTask(Task):
    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.group = "publishing"
        self.description = "Fails if the GPG signing key is not available."

    def run(self) -> None:
        missing = missing_signing_variables(self.project.env)
        if missing:
            raise TaskExecutionError(
                f"Signing key environment variables are not set: {', '.join(missing)}",
                hint="add the GPG signing key to the CI project settings",
            )
        self.project.console.success("Signing key is available")


class CheckVersionTask(Task):
    def __init__(self, name: str, project: Project) -> None:
        super().__init__(name, project)
        self.group = "publishing"
        self.description = "Fails if the project version cannot be released."

    def run(self) -> None:
        problem = version_problem(self.project.version)
        if problem is not None:
            raise TaskExecutionError(
                f"Cannot publish: {problem}",
                hint="publish from a clean checkout of a version tag",
            )
        self.project.console.success(f"Version {self.project.version} can be released")
