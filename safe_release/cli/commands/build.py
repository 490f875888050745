from __future__ import annotations

import typer

from safe_release.cli.commands._helpers import unwrap_or_exit
from safe_release.cli.context import build_context
from safe_release.services.prereqs import PrereqService
from safe_release.services.toolchain import BuildOptions, CargoCompiler, ToolchainDispatcher


def build(
    platform: str = typer.Argument(..., help="Target triple, e.g. x86_64-unknown-linux-musl"),
    binaries: list[str] | None = typer.Option(
        None, "--bin", help="Binary to build (repeatable). Default: all registered binaries"
    ),
    no_clean: bool = typer.Option(False, "--no-clean", help="Skip cargo clean"),
    network_version_mode: str | None = typer.Option(
        None,
        "--network-version-mode",
        envvar="NETWORK_VERSION_MODE",
        help="Forwarded to the build (and cross containers) as NETWORK_VERSION_MODE",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them"),
) -> None:
    """Build release binaries for one platform and stage them in artifacts/."""
    ctx = build_context()
    dispatcher = ToolchainDispatcher(
        paths=ctx.paths,
        matrix=ctx.matrix,
        registry=ctx.registry,
        console=ctx.console,
        compiler=CargoCompiler(paths=ctx.paths, console=ctx.console),
        prereqs=PrereqService(console=ctx.console, cwd=ctx.workspace.root),
    )
    options = BuildOptions(
        clean=not no_clean,
        network_version_mode=network_version_mode,
        dry_run=dry_run,
    )
    staged = unwrap_or_exit(dispatcher.build(platform, binaries or [], options), ctx)
    for path in staged.files:
        ctx.console.print(f"  {path.name}")
