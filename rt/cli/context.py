from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from rt.core.config import CONFIG_FILENAME, ReleaseConfig, load_config_or_default
from rt.core.errors import ErrorCode
from rt.core.result import Err
from rt.git.repository import Repository
from rt.output.console import ConsoleProtocol, RichConsole
from rt.output.prompts import PrompterProtocol, TyperPrompter
from rt.platform.http import HttpClient, RealHttpClient

VERBOSE_ENV = "RELEASE_TOOL_VERBOSE"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol
    repo: Repository
    prompter: PrompterProtocol
    http: HttpClient


def build_context() -> CLIContext:
    root = Path.cwd()
    verbose = os.environ.get(VERBOSE_ENV) == "1"

    config_result = load_config_or_default(root)
    if isinstance(config_result, Err):
        error = config_result.error
        typer.echo(f"error: {error.message}", err=True)
        if error.hint:
            typer.echo(f"hint: {error.hint}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    console = RichConsole(verbose=verbose)
    config_path = root / CONFIG_FILENAME
    if config_path.exists():
        console.debug(f"config: {config_path}")
    else:
        console.debug(f"config: none ({CONFIG_FILENAME} not found, using defaults)")

    return CLIContext(
        root=root,
        config=config_result.value,
        console=console,
        repo=Repository(root),
        prompter=TyperPrompter(),
        http=RealHttpClient(),
    )
