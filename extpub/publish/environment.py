"""CI signals the publishing policy branches on."""

from __future__ import annotations

from extpub.build.project import Project

__all__ = [
    "BRANCH_VARIABLE",
    "FORK_VARIABLE",
    "TAG_VARIABLE",
    "is_fork",
    "is_tag_build",
]

TAG_VARIABLE = "CIRCLE_TAG"
FORK_VARIABLE = "CIRCLE_PR_USERNAME"
BRANCH_VARIABLE = "CIRCLE_BRANCH"


def is_tag_build(project: Project) -> bool:
    """True when CI built a version tag: the only kind of build that may release."""
    return project.env.is_present(TAG_VARIABLE)


def is_fork(project: Project) -> bool:
    """True for pull requests from forks, which get no access to secrets."""
    return project.env.is_present(FORK_VARIABLE)
