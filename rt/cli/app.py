from __future__ import annotations

import os

import typer

from rt import __version__
from rt.cli.commands.release_cmd import plans, run, vars_cmd
from rt.cli.context import VERBOSE_ENV

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release a project: validate versions, then run its release plans.",
)


# Commands
app.command()(run)
app.command()(plans)
app.command("vars")(vars_cmd)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show diagnostic output."),
) -> None:
    if verbose:
        os.environ[VERBOSE_ENV] = "1"


def main() -> None:
    app()
