"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from safe_release.core.result import Err, Result
from safe_release.output.errors import AnyError, error_exit_code, print_error

if TYPE_CHECKING:
    from safe_release.cli.context import CLIContext


T = TypeVar("T")


def unwrap_or_exit[T](result: Result[T, AnyError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code.

    Replaces the common pattern:
        match result:
            case Err(e):
                print_error(e, ctx.console)
                raise typer.Exit(code=error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_error(result.error, ctx.console)
        raise typer.Exit(code=error_exit_code(result.error))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
