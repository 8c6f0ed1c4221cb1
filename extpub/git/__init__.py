"""Git queries."""

from extpub.git.repository import GitError, Repository, normalize_remote_url

__all__ = ["GitError", "Repository", "normalize_remote_url"]
