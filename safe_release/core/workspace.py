"""Workspace detection and paths.

The workspace is the root of the Cargo workspace whose binaries we release.
It is identified by a ``Cargo.toml`` declaring a ``[workspace]`` table, or
given explicitly through ``WORKSPACE_ROOT``.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .config import Config
from .result import Err, Ok, Result

__all__ = [
    "ReleasePaths",
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
    "find_workspace_upward",
    "is_workspace_root",
]


@dataclass(frozen=True)
class WorkspaceError:
    """Error when workspace cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A detected Cargo workspace."""

    root: Path

    @property
    def config_path(self) -> Path:
        """Path to the optional release.toml."""
        return self.root / "release.toml"


@dataclass(frozen=True, slots=True)
class ReleasePaths:
    """Directories a release run reads from and writes to.

    - target: cargo/cross output (``target/<triple>/release``)
    - artifacts: flat staging per platform (``artifacts/<triple>/release``)
    - deploy: packaged archives per binary (``deploy/<binary>``)
    """

    root: Path
    target_dir: Path
    artifacts_dir: Path
    deploy_dir: Path

    @classmethod
    def from_workspace(cls, workspace: Workspace, config: Config) -> ReleasePaths:
        return cls(
            root=workspace.root,
            target_dir=workspace.root / config.paths.target,
            artifacts_dir=workspace.root / config.paths.artifacts,
            deploy_dir=workspace.root / config.paths.deploy,
        )

    def staging_dir(self, triple: str) -> Path:
        return self.artifacts_dir / triple / "release"

    def toolchain_output_dir(self, triple: str) -> Path:
        return self.target_dir / triple / "release"

    def deploy_dir_for(self, binary: str) -> Path:
        return self.deploy_dir / binary


def is_workspace_root(path: Path) -> bool:
    """Return True if path holds a Cargo.toml with a [workspace] table."""
    manifest = path / "Cargo.toml"
    if not manifest.is_file():
        return False
    try:
        data = tomllib.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return False
    return isinstance(data.get("workspace"), dict)


def find_workspace_upward(start: Path) -> Path | None:
    start = start.resolve()
    for candidate in (start, *start.parents):
        if is_workspace_root(candidate):
            return candidate
    return None


def detect_workspace(start_dir: Path | None = None) -> Result[Workspace, WorkspaceError]:
    """Detect the workspace root.

    Order: WORKSPACE_ROOT env var, then upward search from start_dir (or cwd).
    """
    env = os.environ.get("WORKSPACE_ROOT")
    if env:
        root = Path(env).expanduser().resolve()
        if root.is_dir():
            return Ok(Workspace(root=root))
        return Err(WorkspaceError(f"WORKSPACE_ROOT is not a directory: {root}", searched_from=root))

    start = start_dir or Path.cwd()
    found = find_workspace_upward(start)
    if found is None:
        return Err(
            WorkspaceError(
                "No Cargo workspace found (expected a Cargo.toml with a [workspace] table)",
                searched_from=start,
            )
        )
    return Ok(Workspace(root=found))
