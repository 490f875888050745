"""Read crate versions from Cargo manifests."""

from __future__ import annotations

import tomllib
from pathlib import Path

from safe_release.core.result import Err, Ok, Result
from safe_release.core.structured import StrDict, as_str_dict, get_bool, get_str, get_table
from safe_release.release.errors import VersionNotFound
from safe_release.release.registry import BinarySpec

__all__ = ["ManifestReader"]


def _load(path: Path) -> StrDict | str:
    """Parsed manifest, or a reason string when it can't be read."""
    try:
        data = as_str_dict(tomllib.loads(path.read_text(encoding="utf-8")))
    except FileNotFoundError:
        return "manifest not found"
    except (OSError, UnicodeDecodeError) as e:
        return f"cannot read manifest: {e}"
    except tomllib.TOMLDecodeError as e:
        return f"invalid TOML: {e}"
    if data is None:
        return "manifest root is not a table"
    return data


class ManifestReader:
    """Resolves a binary's version from ``<crate_dir>/Cargo.toml``.

    Crates that inherit their version (``version.workspace = true``) are
    resolved through ``[workspace.package]`` in the root manifest.
    """

    def __init__(self, workspace_root: Path) -> None:
        self._root = workspace_root

    def manifest_path(self, spec: BinarySpec) -> Path:
        return self._root / spec.crate_dir / "Cargo.toml"

    def read_version(self, spec: BinarySpec) -> Result[str, VersionNotFound]:
        path = self.manifest_path(spec)

        def missing(reason: str, manifest: Path = path) -> Err[VersionNotFound]:
            return Err(VersionNotFound(binary=spec.name, manifest=manifest, reason=reason))

        data = _load(path)
        if isinstance(data, str):
            return missing(data)

        package = get_table(data, "package")
        if package is None:
            return missing("no [package] table")

        version = get_str(package, "version")
        if version is not None:
            return Ok(version)

        inherited = get_table(package, "version")
        if inherited is not None and get_bool(inherited, "workspace"):
            return self._workspace_version(spec)

        return missing("package.version is missing or empty")

    def _workspace_version(self, spec: BinarySpec) -> Result[str, VersionNotFound]:
        root_manifest = self._root / "Cargo.toml"
        data = _load(root_manifest)
        if isinstance(data, str):
            return Err(VersionNotFound(spec.name, root_manifest, data))
        workspace = get_table(data, "workspace") or {}
        package = get_table(workspace, "package") or {}
        version = get_str(package, "version")
        if version is None:
            return Err(
                VersionNotFound(spec.name, root_manifest, "workspace.package.version is missing")
            )
        return Ok(version)
