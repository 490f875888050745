"""Rebuild the staging layout from CI workflow downloads.

Each CI build job uploads its staging directory as
``safe_network-<triple>.zip``. Dropping those zips into ``artifacts/`` and
unpacking them here reproduces the per-target layout the packager reads.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from zipfile import BadZipFile, ZipFile, ZipInfo

from safe_release.core.result import Err, Ok, Result
from safe_release.core.workspace import ReleasePaths
from safe_release.output.console import ConsoleProtocol
from safe_release.release.errors import ArtifactNotFound, InvalidCiArchive
from safe_release.release.targets import Target, TargetMatrix

__all__ = ["ci_archive_name", "unpack_ci_artifacts"]

_CI_ARCHIVE_PREFIX = "safe_network"


def ci_archive_name(triple: str) -> str:
    return f"{_CI_ARCHIVE_PREFIX}-{triple}.zip"


@dataclass(frozen=True, slots=True)
class _Plan:
    target: Target
    zip_path: Path
    # (entry, flat file name in staging)
    entries: tuple[tuple[ZipInfo, str], ...]


def _plan(target: Target, zip_path: Path) -> Result[_Plan, InvalidCiArchive]:
    """Check zip_path is readable and flattens without name clashes."""

    def invalid(reason: str) -> Err[InvalidCiArchive]:
        return Err(InvalidCiArchive(target=target.triple, path=zip_path, reason=reason))

    try:
        with ZipFile(zip_path) as zf:
            bad = zf.testzip()
            infos = zf.infolist()
    except BadZipFile as e:
        return invalid(f"not a zip file ({e})")
    if bad is not None:
        return invalid(f"corrupt entry {bad}")

    # Staging is flat: directory structure in the zip is dropped.
    entries: list[tuple[ZipInfo, str]] = []
    seen: dict[str, str] = {}
    for info in infos:
        if info.is_dir():
            continue
        name = info.filename.rsplit("/", 1)[-1]
        if name in seen:
            return invalid(f"{seen[name]} and {info.filename} both flatten to {name}")
        seen[name] = info.filename
        entries.append((info, name))
    return Ok(_Plan(target=target, zip_path=zip_path, entries=tuple(entries)))


def unpack_ci_artifacts(
    *, paths: ReleasePaths, matrix: TargetMatrix, console: ConsoleProtocol
) -> Result[int, ArtifactNotFound | InvalidCiArchive]:
    """Unpack every target's CI zip into its staging directory.

    Every zip is located and validated before any staging directory is
    touched, and the zips are only deleted once all of them are extracted.
    Returns the number of files extracted.
    """
    zips: list[tuple[Target, Path]] = []
    for target in matrix.all():
        zip_path = paths.artifacts_dir / ci_archive_name(target.triple)
        if not zip_path.is_file():
            return Err(ArtifactNotFound(binary="*", target=target.triple, path=zip_path))
        zips.append((target, zip_path))

    plans: list[_Plan] = []
    for target, zip_path in zips:
        plan = _plan(target, zip_path)
        if isinstance(plan, Err):
            return plan
        plans.append(plan.value)

    extracted = 0
    for plan in plans:
        staging = paths.staging_dir(plan.target.triple)
        shutil.rmtree(staging, ignore_errors=True)
        staging.mkdir(parents=True)
        with ZipFile(plan.zip_path) as zf:
            for info, name in plan.entries:
                (staging / name).write_bytes(zf.read(info))
        extracted += len(plan.entries)
        console.success(f"{plan.target}: unpacked {plan.zip_path.name}")

    for plan in plans:
        plan.zip_path.unlink()
    return Ok(extracted)
