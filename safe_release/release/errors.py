"""Error payloads for the release pipeline.

Grouped by the stage that produces them. Each names the identifier
involved (platform, binary, component, tag) so output/errors.py can render a
specific message; configuration errors also carry the supported set.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

# --- configuration -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    platform: str
    supported: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class UnknownBinary:
    name: str
    supported: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class NotPublishable:
    """A registered binary that is packaged but never released on its own."""

    name: str
    publishable: tuple[str, ...]


ConfigurationError = UnsupportedPlatform | UnknownBinary | NotPublishable

# --- build -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PrereqMissing:
    name: str
    hint: str


@dataclass(frozen=True, slots=True)
class ToolchainSetupFailed:
    target: str
    command: str
    returncode: int


@dataclass(frozen=True, slots=True)
class CompileFailed:
    binary: str
    target: str
    returncode: int


@dataclass(frozen=True, slots=True)
class OutputMissing:
    binary: str
    target: str
    path: Path


BuildError = (
    UnsupportedPlatform
    | UnknownBinary
    | PrereqMissing
    | ToolchainSetupFailed
    | CompileFailed
    | OutputMissing
)

# --- package -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArtifactNotFound:
    binary: str
    target: str
    path: Path


@dataclass(frozen=True, slots=True)
class VersionNotFound:
    binary: str
    manifest: Path
    reason: str


@dataclass(frozen=True, slots=True)
class InvalidCiArchive:
    """A CI download that cannot be unpacked into the flat staging layout."""

    target: str
    path: Path
    reason: str


PackageError = UnknownBinary | ArtifactNotFound | VersionNotFound

# --- release commit ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReleaseTagParseError:
    """The release commit's tag list could not be parsed.

    ``token`` is the offending `/`-separated piece, when there is one.
    """

    message: str
    token: str | None = None


# --- publish -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SinkError:
    """An upload to one destination failed.

    ``destination`` is the tag (release host) or bucket/key (object storage).
    """

    destination: str
    message: str
