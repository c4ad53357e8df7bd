from __future__ import annotations

import os

import typer

from rt.cli.commands._helpers import exit_on_error, exit_with_code, exit_with_error
from rt.cli.context import CLIContext, build_context
from rt.core.errors import INTERRUPTED_EXIT_CODE
from rt.core.result import Err, Ok, Result
from rt.output.console import Style
from rt.output.prompts import Validator
from rt.services.release.bump import (
    PROJECT_MANIFESTS,
    bump_versions,
    read_manifest_name,
    read_manifest_version,
)
from rt.services.release.catalog import BuiltinDefault, load_plan_catalog
from rt.services.release.errors import ReleaseError, ReleaseErrorKind
from rt.services.release.service import (
    ReleaseVersions,
    VersionInputs,
    describe_plans,
    execute_plans,
    prepare_plans,
    remote_request,
    resolve_publish,
    resolve_versions,
    select_plans,
    trigger_remote_build,
)
from rt.services.release.travis import TravisEndpoint, validate_slug
from rt.services.release.variables import parse_variable_assignments, unassigned_in_config_plans

TOKEN_ENV = "TRAVIS_TOKEN"


def _err(kind: ReleaseErrorKind, message: str, hint: str | None = None) -> Err[ReleaseError]:
    return Err(ReleaseError(kind=kind, message=message, hint=hint))


def _ensure_clean(ctx: CLIContext) -> Result[None, ReleaseError]:
    dirty = ctx.repo.has_uncommitted_changes()
    if isinstance(dirty, Err):
        return _err("git_failed", dirty.error.message)
    if dirty.value:
        return _err(
            "dirty_worktree",
            "There are uncommitted changes in the working tree",
            "commit or stash them before releasing",
        )
    return Ok(None)


def _current_branch(ctx: CLIContext, branch: str | None) -> Result[str, ReleaseError]:
    if branch:
        return Ok(branch)
    current = ctx.repo.current_branch()
    if isinstance(current, Err):
        return _err("git_failed", current.error.message, "pass --branch explicitly")
    return Ok(current.value)


def _confirm(ctx: CLIContext, *, interactive: bool) -> None:
    if not interactive:
        return
    if not ctx.prompter.confirm("Is this OK?", default=False):
        exit_with_error(ReleaseError(kind="aborted", message="Release aborted"), ctx)


def _non_empty(label: str) -> Validator:
    def check(value: str) -> Result[None, ReleaseError]:
        if not value.strip():
            return _err("invalid_input", f"{label} must not be empty")
        return Ok(None)

    return check


def _slug_rule(value: str) -> Result[None, ReleaseError]:
    checked = validate_slug(value)
    if isinstance(checked, Err):
        return checked
    return Ok(None)


def _delegate(
    ctx: CLIContext,
    *,
    versions: ReleaseVersions,
    branch: str,
    bump: bool,
    publish: bool,
    slug: str | None,
    token: str | None,
    interactive: bool,
) -> None:
    endpoint: TravisEndpoint = "pro" if ctx.config.travis == "pro" else "org"

    slug = slug or ctx.config.slug
    if slug:
        slug = exit_on_error(validate_slug(slug), ctx)
    elif interactive:
        slug = ctx.prompter.text("Repository slug (owner/name)", validate=_slug_rule)
    else:
        exit_with_error(
            ReleaseError(
                kind="invalid_input",
                message="Repository slug must be specified",
                hint="use --slug or set \"slug\" in .release.json",
            ),
            ctx,
        )

    token = token or os.environ.get(TOKEN_ENV)
    if not token:
        if not interactive:
            exit_with_error(
                ReleaseError(
                    kind="invalid_input",
                    message="Travis CI token must be specified",
                    hint=f"use --token or set {TOKEN_ENV}",
                ),
                ctx,
            )
        token = ctx.prompter.secret("Travis CI token", validate=_non_empty("Token"))

    request = remote_request(
        slug=slug,
        token=token,
        branch=branch,
        versions=versions,
        bump=bump,
        publish=publish,
        endpoint=endpoint,
    )
    response = exit_on_error(trigger_remote_build(ctx.http, request, console=ctx.console), ctx)
    ctx.console.debug(response)


def _run_bump(
    ctx: CLIContext,
    *,
    versions: ReleaseVersions,
    interactive: bool,
    local: bool,
) -> None:
    manifests = PROJECT_MANIFESTS.get(ctx.config.type or "", ())
    ctx.console.header("Bump Versions")
    if ctx.config.type is None:
        ctx.console.warning('no "type" in .release.json; no manifest will be changed')
    for manifest in manifests:
        suffix = "" if manifest.required else " (if present)"
        ctx.console.print(f"  {manifest.name}: {versions.current} -> {versions.release}{suffix}")
    _confirm(ctx, interactive=interactive)
    if not local:
        return

    written = exit_on_error(
        bump_versions(ctx.root, versions.current, versions.release, ctx.config.type),
        ctx,
    )
    for path in written:
        ctx.console.success(f"{path.name}: {versions.release}")


def _release(
    ctx: CLIContext,
    *,
    inputs: VersionInputs,
    publish_flag: bool | None,
    slug: str | None,
    token: str | None,
    execute: bool,
    branch: str | None,
    var: list[str],
) -> None:
    interactive = inputs.interactive
    console = ctx.console

    exit_on_error(_ensure_clean(ctx), ctx)
    branch_name = exit_on_error(_current_branch(ctx, branch), ctx)
    cli_values = exit_on_error(parse_variable_assignments(var), ctx)
    catalog = exit_on_error(load_plan_catalog(ctx.config), ctx)

    if interactive:
        console.field("Name", read_manifest_name(ctx.root) or ctx.root.name)
        console.field("Branch", branch_name)

    versions = exit_on_error(
        resolve_versions(
            inputs,
            prompter=ctx.prompter,
            repo=ctx.repo,
            manifest_version=read_manifest_version(ctx.root),
            environ=os.environ,
            console=console,
        ),
        ctx,
    )

    local = execute or ctx.config.travis is None

    if inputs.bump:
        _run_bump(ctx, versions=versions, interactive=interactive, local=local)
        if not local:
            _delegate(
                ctx,
                versions=versions,
                branch=branch_name,
                bump=True,
                publish=False,
                slug=slug,
                token=token,
                interactive=interactive,
            )
        return

    publish = resolve_publish(publish_flag, interactive=interactive, prompter=ctx.prompter)
    selected = exit_on_error(select_plans(catalog, versions, publish=publish), ctx)
    prepared = exit_on_error(
        prepare_plans(
            selected,
            config=ctx.config,
            constants=versions.constants(branch_name),
            cli_values=cli_values,
            environ=os.environ,
            require_complete=local,
        ),
        ctx,
    )

    describe_plans(prepared, console=console)
    _confirm(ctx, interactive=interactive)

    if not local:
        _delegate(
            ctx,
            versions=versions,
            branch=branch_name,
            bump=False,
            publish=publish,
            slug=slug,
            token=token,
            interactive=interactive,
        )
        return

    exit_on_error(execute_plans(prepared, cwd=ctx.root, environ=os.environ, console=console), ctx)
    console.success(f"Released {versions.release}")


def run(
    current_version: str | None = typer.Argument(None, help="Current (development) version"),
    release_version: str | None = typer.Argument(None, help="Version to release"),
    development_version: str | None = typer.Argument(
        None, help="Version to continue development on"
    ),
    bump: bool = typer.Option(
        False, "--bump", "-b", help="Only bump manifest versions (CURRENT -> RELEASE)"
    ),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", "-n", help="Never prompt; fail on missing input"
    ),
    publish: bool = typer.Option(False, "--publish", "-p", help="Run the publish plan"),
    no_publish: bool = typer.Option(False, "--no-publish", help="Skip the publish plan"),
    slug: str | None = typer.Option(None, "--slug", "-s", help="Repository slug (owner/name)"),
    token: str | None = typer.Option(None, "--token", "-t", help="Travis CI API token"),
    execute: bool = typer.Option(
        False, "--execute", "-x", help="Run plans here even when Travis CI is configured"
    ),
    branch: str | None = typer.Option(None, "--branch", help="Branch name (default: git HEAD)"),
    var: list[str] = typer.Option([], "--var", help="Set a plan variable (NAME=VALUE)"),
) -> None:
    """Release the project: bump, tag, continue development, publish."""
    ctx = build_context()

    if publish and no_publish:
        exit_with_error(
            ReleaseError(
                kind="invalid_input",
                message="--publish and --no-publish are mutually exclusive",
            ),
            ctx,
        )
    publish_flag: bool | None = True if publish else (False if no_publish else None)

    inputs = VersionInputs(
        current=current_version,
        release=release_version,
        development=development_version,
        bump=bump,
        interactive=not non_interactive,
    )
    try:
        _release(
            ctx,
            inputs=inputs,
            publish_flag=publish_flag,
            slug=slug,
            token=token,
            execute=execute,
            branch=branch,
            var=var,
        )
    except KeyboardInterrupt:
        ctx.console.newline()
        ctx.console.error("Interrupted")
        exit_with_code(INTERRUPTED_EXIT_CODE)


def plans() -> None:
    """List the plans available to `release run`."""
    ctx = build_context()
    catalog = exit_on_error(load_plan_catalog(ctx.config), ctx)

    for name in catalog.names():
        entry = catalog.entry(name)
        if entry is None:
            continue
        origin = "built-in" if isinstance(entry, BuiltinDefault) else ".release.json"
        ctx.console.header(f"{name} ({origin})")
        for line in entry.plan.describe():
            ctx.console.print(f"  {line}")


def vars_cmd() -> None:
    """Show plan variables that .release.json does not provide."""
    ctx = build_context()
    exit_on_error(load_plan_catalog(ctx.config), ctx)

    missing = unassigned_in_config_plans(ctx.config)
    if not missing:
        ctx.console.success("every plan variable is provided by .release.json or the tool")
        return

    for name in sorted(missing):
        ctx.console.header(name)
        for variable in sorted(missing[name]):
            source = "environment" if variable in os.environ else "unset"
            style = Style.DIM if source == "environment" else Style.WARNING
            ctx.console.print(f"  {variable} ({source})", style)
    ctx.console.print("Provide them with --var NAME=VALUE or the environment.", Style.DIM)

