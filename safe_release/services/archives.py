"""Deterministic archive writers.

Identical inputs produce byte-identical archives: entry timestamps, owners
and modes are fixed and the gzip header carries no mtime or filename. That
keeps re-packaging idempotent and uploads comparable across runs.
"""

from __future__ import annotations

import gzip
import tarfile
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

__all__ = ["write_tar_gz", "write_zip", "EXECUTABLE_MODE"]

EXECUTABLE_MODE = 0o755
# Earliest timestamp the ZIP format can represent.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


def write_zip(zip_path: Path, *, files: list[tuple[Path, str]]) -> None:
    """Write files (source, name in archive) to a zip, flattened and deterministic."""
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    with ZipFile(zip_path, "w", compression=ZIP_DEFLATED) as zf:
        for src, arcname in files:
            info = ZipInfo(arcname, date_time=_ZIP_EPOCH)
            info.compress_type = ZIP_DEFLATED
            info.create_system = 3  # unix, so external_attr carries the mode
            info.external_attr = (0o100000 | EXECUTABLE_MODE) << 16
            zf.writestr(info, src.read_bytes())


def write_tar_gz(tar_path: Path, *, files: list[tuple[Path, str]]) -> None:
    """Write files (source, name in archive) to a gzip tarball, deterministic."""
    tar_path.parent.mkdir(parents=True, exist_ok=True)
    with tar_path.open("wb") as raw:
        with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
            with tarfile.open(fileobj=gz, mode="w", format=tarfile.GNU_FORMAT) as tar:
                for src, arcname in files:
                    info = tarfile.TarInfo(arcname)
                    info.size = src.stat().st_size
                    info.mtime = 0
                    info.mode = EXECUTABLE_MODE
                    info.uid = info.gid = 0
                    info.uname = info.gname = ""
                    with src.open("rb") as fh:
                        tar.addfile(info, fh)
