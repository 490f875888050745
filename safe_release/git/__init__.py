"""Git operations."""

from safe_release.git.repository import GitError, Repository

__all__ = ["GitError", "Repository"]
