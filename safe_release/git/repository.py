"""Git repository access.

Only what release publishing needs: the message of the commit being
released (normally HEAD on the release branch).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from safe_release.core.result import Err, Ok, Result
from safe_release.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git working copy."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def commit_message(self, rev: str = "HEAD") -> Result[str, GitError]:
        """Full message (subject and body) of rev."""
        result = run_process(
            ["git", "log", "-1", "--pretty=%B", rev],
            cwd=self.path,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="log",
                        message=e.stderr.strip() or f"git log failed for {rev}",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())
