from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from rt.core.config import ReleaseConfig
from rt.core.result import Err, Ok, Result
from rt.git.repository import GitError
from rt.output.console import ConsoleProtocol, Style
from rt.output.prompts import PrompterProtocol
from rt.platform.http import HttpClient
from rt.services.release.catalog import PlanCatalog
from rt.services.release.errors import ReleaseError
from rt.services.release.plan import Plan
from rt.services.release.travis import RemoteRun, TravisEndpoint, TravisRequest, trigger_build
from rt.services.release.variables import (
    ReleaseConstants,
    Resolution,
    resolve_for_plan,
    unassigned_error,
)
from rt.services.release.versions import (
    assert_valid_development_version,
    assert_valid_release_or_release_candidate_version,
    assert_valid_semantic_version,
    is_release_candidate_version,
    suggest_development_version,
    suggest_release_version,
)

ReleaseValidator = Callable[[str], Result[None, ReleaseError]]


class TagSource(Protocol):
    def tag_exists(self, tag: str) -> Result[bool, GitError]: ...


@dataclass(frozen=True, slots=True)
class VersionInputs:
    """Versions given on the command line, plus how to fill the gaps."""

    current: str | None = None
    release: str | None = None
    development: str | None = None
    bump: bool = False
    interactive: bool = True


@dataclass(frozen=True, slots=True)
class ReleaseVersions:
    current: str
    release: str
    development: str | None = None

    @property
    def is_release_candidate(self) -> bool:
        return is_release_candidate_version(self.release)

    def constants(self, branch: str) -> ReleaseConstants:
        return ReleaseConstants(
            branch=branch,
            current_version=self.current,
            release_version=self.release,
            development_version=self.development,
        )


@dataclass(frozen=True, slots=True)
class SelectedPlan:
    title: str
    name: str
    plan: Plan


@dataclass(frozen=True, slots=True)
class PreparedPlan:
    selected: SelectedPlan
    resolution: Resolution


def _tag_guard(repo: TagSource) -> ReleaseValidator:
    def check(version: str) -> Result[None, ReleaseError]:
        exists = repo.tag_exists(version)
        if isinstance(exists, Err):
            return Err(ReleaseError(kind="git_failed", message=exists.error.message))
        if exists.value:
            return Err(
                ReleaseError(
                    kind="tag_exists",
                    message=f"A tag already exists for '{version}'",
                    hint="choose another release version",
                )
            )
        return Ok(None)

    return check


def _all_of(*validators: ReleaseValidator) -> ReleaseValidator:
    def check(value: str) -> Result[None, ReleaseError]:
        for validate in validators:
            result = validate(value)
            if isinstance(result, Err):
                return result
        return Ok(None)

    return check


def _missing(message: str) -> Err[ReleaseError]:
    return Err(
        ReleaseError(
            kind="invalid_input",
            message=message,
            hint="pass it as an argument, set it in the environment, or drop --non-interactive",
        )
    )


def _given_or_asked(
    given: str | None,
    *,
    label: str,
    validate: ReleaseValidator,
    inputs: VersionInputs,
    prompter: PrompterProtocol,
    default: str | None = None,
) -> Result[str | None, ReleaseError]:
    """Validate a supplied version, or ask for one when interactive.

    Returns ``Ok(None)`` when nothing was given and prompting is not allowed.
    """
    if given:
        checked = validate(given)
        if isinstance(checked, Err):
            return checked
        return Ok(given)
    if not inputs.interactive:
        return Ok(None)
    return Ok(prompter.text(label, validate=validate, default=default))


def resolve_versions(
    inputs: VersionInputs,
    *,
    prompter: PrompterProtocol,
    repo: TagSource,
    manifest_version: str | None,
    environ: Mapping[str, str],
    console: ConsoleProtocol,
) -> Result[ReleaseVersions, ReleaseError]:
    """Settle the current, release and development versions.

    Each version comes from the command line, then the environment, then
    (for the current version) the manifest, then a prompt. When bumping,
    any semantic versions are accepted and no development version is used.
    """
    current_rule: ReleaseValidator = (
        assert_valid_semantic_version if inputs.bump else assert_valid_development_version
    )
    release_rule: ReleaseValidator = (
        assert_valid_semantic_version
        if inputs.bump
        else _all_of(assert_valid_release_or_release_candidate_version, _tag_guard(repo))
    )

    current = _given_or_asked(
        inputs.current or environ.get("CURRENT_VERSION") or manifest_version,
        label="Current Version",
        validate=current_rule,
        inputs=inputs,
        prompter=prompter,
    )
    if isinstance(current, Err):
        return current
    if current.value is None:
        return _missing("Current version must be specified")
    current_version = current.value
    console.field("Current Version", current_version)

    release = _given_or_asked(
        inputs.release or environ.get("RELEASE_VERSION"),
        label="Next Version" if inputs.bump else "Release Version",
        validate=release_rule,
        inputs=inputs,
        prompter=prompter,
        default=suggest_release_version(current_version),
    )
    if isinstance(release, Err):
        return release
    if release.value is None:
        noun = "Next version" if inputs.bump else "Release version"
        return _missing(f"{noun} must be specified")
    release_version = release.value
    console.field("Next Version" if inputs.bump else "Release Version", release_version)

    if inputs.bump:
        return Ok(ReleaseVersions(current=current_version, release=release_version))

    development_version: str | None = None
    given = inputs.development or environ.get("DEVELOPMENT_VERSION")
    if given or (inputs.interactive and prompter.confirm("Continue development?", default=True)):
        development = _given_or_asked(
            given,
            label="Development Version",
            validate=assert_valid_development_version,
            inputs=inputs,
            prompter=prompter,
            default=suggest_development_version(release_version),
        )
        if isinstance(development, Err):
            return development
        development_version = development.value
    if development_version is not None:
        console.field("Development Version", development_version)

    return Ok(
        ReleaseVersions(
            current=current_version,
            release=release_version,
            development=development_version,
        )
    )


def resolve_publish(
    flag: bool | None,
    *,
    interactive: bool,
    prompter: PrompterProtocol,
) -> bool:
    """``--publish``/``--no-publish`` wins; otherwise ask, or assume no."""
    if flag is not None:
        return flag
    if not interactive:
        return False
    return prompter.confirm("Publish?", default=False)


def select_plans(
    catalog: PlanCatalog,
    versions: ReleaseVersions,
    *,
    publish: bool,
) -> Result[list[SelectedPlan], ReleaseError]:
    """Pick the plans to run, in order.

    Every plan is looked up before anything runs, so a missing plan is
    reported before the repository is touched.
    """
    wanted: list[tuple[str, str]] = [
        (
            "Create Release Candidate" if versions.is_release_candidate else "Create Release",
            "release",
        )
    ]
    if versions.development is not None:
        wanted.append(("Continue Development", "development"))
    if publish:
        wanted.append(("Publish", "publish"))

    selected: list[SelectedPlan] = []
    for title, name in wanted:
        plan = catalog.get(name)
        if isinstance(plan, Err):
            return plan
        selected.append(SelectedPlan(title=title, name=name, plan=plan.value))
    return Ok(selected)


def prepare_plans(
    selected: Sequence[SelectedPlan],
    *,
    config: ReleaseConfig,
    constants: ReleaseConstants,
    cli_values: Mapping[str, str] | None,
    environ: Mapping[str, str],
    require_complete: bool = True,
) -> Result[list[PreparedPlan], ReleaseError]:
    """Resolve the variables of every selected plan.

    The first plan with unassigned variables fails the whole batch, unless
    ``require_complete`` is off (the plans will run elsewhere, with another
    environment).
    """
    prepared: list[PreparedPlan] = []
    for item in selected:
        resolution = resolve_for_plan(
            config,
            item.name,
            item.plan.templates,
            constants,
            cli_values,
            environ,
        )
        if require_complete and not resolution.complete:
            return Err(unassigned_error(item.name, resolution.unassigned))
        prepared.append(PreparedPlan(selected=item, resolution=resolution))
    return Ok(prepared)


def describe_plans(
    prepared: Sequence[PreparedPlan],
    *,
    console: ConsoleProtocol,
) -> None:
    for item in prepared:
        console.header(item.selected.title)
        for line in item.selected.plan.describe(item.resolution.assigned):
            console.print(f"  {line}")
        for name in sorted(item.resolution.origins):
            console.debug(f"{name} from {item.resolution.origins[name]}")


def execute_plans(
    prepared: Sequence[PreparedPlan],
    *,
    cwd: Path,
    environ: Mapping[str, str],
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Run the prepared plans in order; the first failure stops everything.

    Children see ``environ`` plus the plan's resolved variables, so a
    command can read its values from the environment as well as from its
    arguments.
    """
    for item in prepared:
        console.header(item.selected.title)
        child_env = {**environ, **item.resolution.assigned}
        ran = item.selected.plan.run(
            item.resolution.assigned,
            cwd=cwd,
            env=child_env,
            console=console,
        )
        if isinstance(ran, Err):
            return ran
        console.print(f"{item.selected.title}: done", Style.SUCCESS)
    return Ok(None)


def remote_request(
    *,
    slug: str,
    token: str,
    branch: str,
    versions: ReleaseVersions,
    bump: bool,
    publish: bool,
    endpoint: TravisEndpoint,
) -> TravisRequest:
    """Build the CI request that re-runs this release non-interactively."""
    return TravisRequest(
        slug=slug,
        token=token,
        run=RemoteRun(
            branch=branch,
            current_version=versions.current,
            release_version=versions.release,
            development_version=versions.development,
            bump=bump,
            publish=publish,
        ),
        endpoint=endpoint,
    )


def trigger_remote_build(
    client: HttpClient,
    request: TravisRequest,
    *,
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    console.print(f"Triggering Travis CI build for {request.slug} on {request.run.branch}")
    console.debug(f"after_success: {request.run.command_line()}")
    triggered = trigger_build(client, request)
    if isinstance(triggered, Err):
        return triggered
    console.success("Travis CI build requested")
    return triggered
