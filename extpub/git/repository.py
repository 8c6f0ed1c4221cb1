"""Read-only git queries used to describe where a project's sources live.

Usage:
    repo = Repository(project.project_dir)
    match repo.remote_url():
        case Ok(url):
            pom.scm.url = url
        case Err(e):
            console.print(f"no scm info: {e.message}", Style.DIM)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from extpub.core.result import Err, Ok, Result
from extpub.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

_SCP_LIKE_RE = re.compile(r"^(?P<user>[^@/]+)@(?P<host>[^:/]+):(?P<path>.+)$")

__all__ = ["GitError", "Repository", "normalize_remote_url"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation."""

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git working tree, queried through the ``git`` executable."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        """Get the fetch URL of ``remote``, normalized to https."""
        result = self._git(["remote", "get-url", remote])
        match result:
            case Err(e):
                return Err(e)
            case Ok(stdout):
                url = stdout.strip()
                if not url:
                    return Err(GitError(command="remote get-url", message=f"empty url for {remote}"))
                return Ok(normalize_remote_url(url))

    def head_commit(self) -> Result[str, GitError]:
        result = self._git(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(e)
            case Ok(stdout):
                return Ok(stdout.strip())

    def _git(self, args: list[str]) -> Result[str, GitError]:
        result = run_process(["git", *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS)
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=" ".join(args[:2]),
                        message=e.stderr.strip() or str(e),
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout)


def normalize_remote_url(url: str) -> str:
    """Turn ``git@host:org/repo.git`` into ``https://host/org/repo``.

    https URLs only lose their ``.git`` suffix.
    """
    m = _SCP_LIKE_RE.match(url)
    if m is not None:
        url = f"https://{m.group('host')}/{m.group('path')}"
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url
