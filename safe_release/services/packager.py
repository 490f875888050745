"""Package staged binaries into versioned release archives.

For every target, in matrix order, ``artifacts/<triple>/release/<exe>``
becomes ``deploy/<binary>/<binary>-<version>-<triple>.{zip,tar.gz}``.
A packaging run replaces the binary's deploy directory; it never adds to
what a previous run left behind.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from safe_release.core.result import Err, Ok, Result
from safe_release.core.workspace import ReleasePaths
from safe_release.output.console import ConsoleProtocol
from safe_release.release.errors import ArtifactNotFound, PackageError
from safe_release.release.model import Archive, archive_basename
from safe_release.release.registry import BinaryRegistry
from safe_release.release.targets import Target, TargetMatrix
from safe_release.services.archives import EXECUTABLE_MODE, write_tar_gz, write_zip
from safe_release.services.manifest import ManifestReader

__all__ = ["Packager"]


class Packager:
    def __init__(
        self,
        *,
        paths: ReleasePaths,
        matrix: TargetMatrix,
        registry: BinaryRegistry,
        manifests: ManifestReader,
        console: ConsoleProtocol,
    ) -> None:
        self._paths = paths
        self._matrix = matrix
        self._registry = registry
        self._manifests = manifests
        self._console = console

    def artifact_path(self, binary: str, target: Target) -> Path:
        return self._paths.staging_dir(target.triple) / target.exe_name(binary)

    def package(
        self, binary: str, version: str | None = None
    ) -> Result[tuple[Archive, ...], PackageError]:
        """Package binary for every target in the matrix.

        Args:
            binary: registered binary name
            version: explicit version; read from the crate manifest when None

        Returns:
            Ok(archives) in matrix order, zip before tar.gz for each target.
        """
        spec_result = self._registry.resolve(binary)
        if isinstance(spec_result, Err):
            return spec_result
        spec = spec_result.value

        if version is None or not version.strip():
            version_result = self._manifests.read_version(spec)
            if isinstance(version_result, Err):
                return version_result
            version = version_result.value
        version = version.strip()

        # Locate everything before touching the previous output.
        sources: list[tuple[Target, Path]] = []
        for target in self._matrix.all():
            src = self.artifact_path(binary, target)
            if not src.is_file():
                return Err(ArtifactNotFound(binary=binary, target=target.triple, path=src))
            sources.append((target, src))

        out_dir = self._paths.deploy_dir_for(binary)
        shutil.rmtree(out_dir, ignore_errors=True)
        out_dir.mkdir(parents=True)

        archives: list[Archive] = []
        for target, src in sources:
            self._console.print(f"Packaging {binary} {version} for {target}...")
            src.chmod(src.stat().st_mode | EXECUTABLE_MODE)
            base = out_dir / archive_basename(binary, version, target.triple)
            entry = [(src, target.exe_name(binary))]

            zip_path = base.with_name(base.name + ".zip")
            write_zip(zip_path, files=entry)
            archives.append(Archive(binary, version, target.triple, "zip", zip_path))

            tar_path = base.with_name(base.name + ".tar.gz")
            write_tar_gz(tar_path, files=entry)
            archives.append(Archive(binary, version, target.triple, "tar.gz", tar_path))

        self._console.success(f"{len(archives)} archives in {out_dir}")
        return Ok(tuple(archives))
