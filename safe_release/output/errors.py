"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX. Every
message names the identifier involved; configuration errors also list what
would have been accepted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from safe_release.core.config import ConfigError
from safe_release.core.errors import ErrorCode
from safe_release.core.workspace import WorkspaceError
from safe_release.git.repository import GitError
from safe_release.output.console import Style
from safe_release.release.errors import (
    ArtifactNotFound,
    CompileFailed,
    InvalidCiArchive,
    NotPublishable,
    OutputMissing,
    PrereqMissing,
    ReleaseTagParseError,
    SinkError,
    ToolchainSetupFailed,
    UnknownBinary,
    UnsupportedPlatform,
    VersionNotFound,
)

if TYPE_CHECKING:
    from safe_release.output.console import ConsoleProtocol

__all__ = ["AnyError", "error_exit_code", "format_error", "print_error"]

AnyError = (
    UnsupportedPlatform
    | UnknownBinary
    | NotPublishable
    | PrereqMissing
    | ToolchainSetupFailed
    | CompileFailed
    | OutputMissing
    | ArtifactNotFound
    | InvalidCiArchive
    | VersionNotFound
    | ReleaseTagParseError
    | SinkError
    | ConfigError
    | WorkspaceError
    | GitError
)


def format_error(error: AnyError) -> tuple[str, str | None]:
    """Return (message, hint) for an error."""
    match error:
        case UnsupportedPlatform(platform=platform, supported=supported):
            return f"unsupported platform: {platform}", f"Supported: {', '.join(supported)}"
        case UnknownBinary(name=name, supported=supported):
            return f"unknown binary: {name}", f"Supported: {', '.join(supported)}"
        case NotPublishable(name=name, publishable=publishable):
            return f"{name} is not a publishable binary", f"Publishable: {', '.join(publishable)}"
        case PrereqMissing(name=name, hint=hint):
            return f"{name}: missing", hint
        case ToolchainSetupFailed(target=target, command=command, returncode=rc):
            return f"toolchain setup for {target} failed: {command} (exit {rc})", None
        case CompileFailed(binary=binary, target=target, returncode=rc):
            return f"build of {binary} for {target} failed (exit {rc})", None
        case OutputMissing(binary=binary, target=target, path=path):
            return f"build of {binary} for {target} produced no output at {path}", None
        case ArtifactNotFound(binary=binary, target=target, path=path):
            return f"artifact not found for {binary} ({target}): {path}", None
        case InvalidCiArchive(target=target, path=path, reason=reason):
            return f"cannot unpack {path.name} ({target}): {reason}", None
        case VersionNotFound(binary=binary, manifest=manifest, reason=reason):
            return f"version not found for {binary} in {manifest}: {reason}", None
        case ReleaseTagParseError(message=message, token=_):
            return message, "Expected: chore(release): <crate>-v<version>/<crate>-v<version>"
        case SinkError(destination=_, message=message):
            return message, None
        case ConfigError(message=message, path=_):
            return message, None
        case WorkspaceError(message=message, searched_from=searched_from):
            hint = f"searched from {searched_from}" if searched_from else None
            return message, hint
        case GitError(command=command, message=message, returncode=_):
            return f"git {command}: {message}", None
    return str(error), None


def print_error(error: AnyError, console: ConsoleProtocol) -> None:
    message, hint = format_error(error)
    console.error(message)
    if hint:
        console.print(hint, Style.DIM)


def error_exit_code(error: AnyError) -> int:
    match error:
        case UnsupportedPlatform() | UnknownBinary() | NotPublishable() | ReleaseTagParseError():
            return int(ErrorCode.USER_ERROR)
        case VersionNotFound():
            return int(ErrorCode.USER_ERROR)
        case PrereqMissing() | ConfigError() | WorkspaceError() | GitError():
            return int(ErrorCode.ENV_ERROR)
        case ToolchainSetupFailed() | CompileFailed() | OutputMissing():
            return int(ErrorCode.BUILD_ERROR)
        case ArtifactNotFound() | InvalidCiArchive():
            return int(ErrorCode.IO_ERROR)
        case SinkError():
            return int(ErrorCode.NETWORK_ERROR)
    return int(ErrorCode.USER_ERROR)
