from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

ArchiveFormat = Literal["zip", "tar.gz"]

ARCHIVE_FORMATS: tuple[ArchiveFormat, ...] = ("zip", "tar.gz")


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    """One (component, version) pair from a release commit."""

    component: str
    version: str

    @property
    def tag(self) -> str:
        """Git tag name of the component's release, e.g. ``sn_node-v1.2.3``."""
        return f"{self.component}-v{self.version}"


# Ordered as the tags appear in the commit.
type ReleaseEvent = tuple[ReleaseTag, ...]


def archive_basename(binary: str, version: str, triple: str) -> str:
    return f"{binary}-{version}-{triple}"


@dataclass(frozen=True, slots=True)
class Archive:
    """A packaged binary for one platform in one format."""

    binary: str
    version: str
    target: str
    format: ArchiveFormat
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name
