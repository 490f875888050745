from __future__ import annotations

import typer

from safe_release.cli.commands._helpers import unwrap_or_exit
from safe_release.cli.context import build_context
from safe_release.services.artifacts import unpack_ci_artifacts

artifacts_app = typer.Typer(add_completion=False, no_args_is_help=True)


@artifacts_app.command("unpack")
def unpack_cmd() -> None:
    """Unpack CI zips (artifacts/safe_network-<triple>.zip) into the staging layout."""
    ctx = build_context()
    count = unwrap_or_exit(
        unpack_ci_artifacts(paths=ctx.paths, matrix=ctx.matrix, console=ctx.console), ctx
    )
    ctx.console.success(f"{count} files staged under {ctx.paths.artifacts_dir}")
