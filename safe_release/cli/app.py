from __future__ import annotations

import os
from pathlib import Path

import typer

from safe_release import __version__
from safe_release.cli.commands.artifacts import artifacts_app
from safe_release.cli.commands.build import build
from safe_release.cli.commands.package import package
from safe_release.cli.commands.release_cmd import publish, tags, upload_bucket
from safe_release.cli.commands.targets import targets
from safe_release.core.errors import ErrorCode
from safe_release.core.workspace import is_workspace_root

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Commands
app.command()(build)
app.command()(package)
app.command()(tags)
app.command()(publish)
app.command("upload-bucket")(upload_bucket)
app.command()(targets)

# Sub-apps
app.add_typer(artifacts_app, name="artifacts")


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        help="Cargo workspace root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if workspace is not None:
        try:
            root = workspace.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --workspace: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir() or not is_workspace_root(root):
            typer.echo(
                f"error: --workspace '{root}' is not a Cargo workspace "
                "(no [workspace] in Cargo.toml)",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ["WORKSPACE_ROOT"] = str(root)


def main() -> None:
    app()
