from __future__ import annotations

import typer

from safe_release.cli.commands._helpers import unwrap_or_exit
from safe_release.cli.context import build_context
from safe_release.services.manifest import ManifestReader
from safe_release.services.packager import Packager


def package(
    binary: str = typer.Argument(..., help="Binary name, e.g. safenode"),
    version: str | None = typer.Option(
        None, "--version", help="Version to package (default: read from the crate's Cargo.toml)"
    ),
) -> None:
    """Package a staged binary for every platform into deploy/<binary>/."""
    ctx = build_context()
    packager = Packager(
        paths=ctx.paths,
        matrix=ctx.matrix,
        registry=ctx.registry,
        manifests=ManifestReader(ctx.workspace.root),
        console=ctx.console,
    )
    archives = unwrap_or_exit(packager.package(binary, version), ctx)
    for archive in archives:
        ctx.console.print(f"  {archive.filename}")
