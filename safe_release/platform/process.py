"""Subprocess execution with Result-based error handling.

Every external tool (cargo, cross, rustup, apt, gh, git) goes through this
module so failures come back as ProcessError values rather than exceptions.

Usage:
    result = run(["rustup", "target", "list", "--installed"], cwd=root)
    match result:
        case Ok(stdout):
            installed = stdout.split()
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from safe_release.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]

# Return code used when the process never ran or was killed on timeout.
NOT_RUN = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not run or exited non-zero.

    Attributes:
        command: argv as executed
        returncode: exit status, or -1 if it never ran or timed out
        stdout: captured standard output (empty for streamed commands)
        stderr: captured standard error, or the reason it never ran
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _execute(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    *,
    capture: bool,
) -> Result[str, ProcessError]:
    argv = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=capture,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(argv, NOT_RUN, partial, f"Command timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(argv, NOT_RUN, "", str(e)))

    stdout = proc.stdout if capture else ""
    if proc.returncode != 0:
        stderr = proc.stderr if capture else ""
        return Err(ProcessError(argv, proc.returncode, stdout, stderr))
    return Ok(stdout)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run cmd in cwd and return its stdout.

    Args:
        cmd: command and arguments
        cwd: working directory
        env: full environment for the child (inherits ours when None)
        timeout: seconds before the child is killed (no limit when None)
    """
    return _execute(cmd, cwd, env, timeout, capture=True)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run cmd with its output streamed to the terminal.

    For long toolchain commands (cargo build, apt-get install) whose progress
    should stay visible. Only the exit status is kept.
    """
    return _execute(cmd, cwd, env, timeout, capture=False).map(lambda _: None)
