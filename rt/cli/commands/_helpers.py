"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from rt.core.errors import ErrorCode
from rt.core.result import Err, Result
from rt.output.console import Style
from rt.output.errors import print_release_error, release_error_exit_code
from rt.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from rt.cli.context import CLIContext

T = TypeVar("T")
E = TypeVar("E")


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Exit with an error if result is Err, otherwise return its value.

    A ``ReleaseError`` picks its own exit code from its kind; any other
    error is expected to have 'message' and optional 'hint' attributes and
    exits with ``error_code``.
    """
    if isinstance(result, Err):
        error = result.error
        if isinstance(error, ReleaseError):
            exit_with_error(error, ctx)
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def exit_with_error(error: ReleaseError, ctx: CLIContext) -> NoReturn:
    """Print a release error and exit with the code for its kind."""
    print_release_error(error, ctx.console)
    raise typer.Exit(code=release_error_exit_code(error))
