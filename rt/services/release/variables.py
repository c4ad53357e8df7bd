"""Variable discovery and resolution for plan command templates.

Templates reference variables as ``$NAME`` or ``${NAME}``; ``\\$`` is a
literal dollar sign. Values come from ordered sources and the first source
that defines a name wins:

1. the plan's ``env`` block in `.release.json`
2. the global ``env`` block in `.release.json`
3. values computed by the program (built-in constants, then ``--var`` flags)
4. the process environment

Resolution never fails. Names nobody provides are reported in
``Resolution.unassigned`` and the caller decides what to do about them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from rt.core.config import ReleaseConfig
from rt.core.result import Err, Ok, Result
from rt.services.release.errors import ReleaseError

VARIABLE_RE = re.compile(r"(?<!\\)\$(?:\{([A-Za-z0-9_]+)\}|([A-Za-z0-9_]+))")
_ASSIGNMENT_NAME_RE = re.compile(r"[A-Za-z0-9_]+")

BUILTIN_VARIABLES = ("BRANCH", "CURRENT_VERSION", "RELEASE_VERSION", "DEVELOPMENT_VERSION")


@dataclass(frozen=True, slots=True)
class ReleaseConstants:
    """Values the program computes before any plan runs."""

    branch: str
    current_version: str
    release_version: str
    development_version: str | None = None

    def as_variables(self) -> Mapping[str, str]:
        values = {
            "BRANCH": self.branch,
            "CURRENT_VERSION": self.current_version,
            "RELEASE_VERSION": self.release_version,
        }
        if self.development_version is not None:
            values["DEVELOPMENT_VERSION"] = self.development_version
            # Name used by older default development plans.
            values["NEXT_DEVELOPMENT_VERSION"] = self.development_version
        return MappingProxyType(values)


@dataclass(frozen=True, slots=True)
class VariableSource:
    """One layer of variable values, labelled for diagnostics."""

    name: str
    values: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class Resolution:
    assigned: Mapping[str, str]
    unassigned: frozenset[str]
    origins: Mapping[str, str]  # variable name -> source name

    @property
    def complete(self) -> bool:
        return not self.unassigned


def scan_required_variables(templates: Iterable[str]) -> frozenset[str]:
    """Collect every variable name referenced by the templates."""
    required: set[str] = set()
    for template in templates:
        for m in VARIABLE_RE.finditer(template):
            required.add(m.group(1) or m.group(2))
    return frozenset(required)


def resolve(required: Iterable[str], sources: Sequence[VariableSource]) -> Resolution:
    """Assign each required name from the first source that defines it."""
    assigned: dict[str, str] = {}
    origins: dict[str, str] = {}
    wanted = frozenset(required)

    for source in sources:
        for name in wanted:
            if name in assigned or name not in source.values:
                continue
            assigned[name] = source.values[name]
            origins[name] = source.name

    return Resolution(
        assigned=MappingProxyType(assigned),
        unassigned=frozenset(wanted - assigned.keys()),
        origins=MappingProxyType(origins),
    )


def plan_sources(
    config: ReleaseConfig,
    plan_name: str,
    constants: ReleaseConstants | None,
    cli_values: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[VariableSource, ...]:
    """Build the ordered source list for one plan.

    Pass ``environ=None`` to ignore the process environment.
    """
    program: dict[str, str] = {}
    if cli_values:
        program.update(cli_values)
    if constants is not None:
        # Constants are computed by the program and beat --var flags.
        program.update(constants.as_variables())

    sources = [
        VariableSource(name=f"plans.{plan_name}.env", values=config.plan_env(plan_name)),
        VariableSource(name="env", values=config.env),
        VariableSource(name="program", values=MappingProxyType(program)),
    ]
    if environ is not None:
        sources.append(VariableSource(name="process", values=environ))
    return tuple(sources)


def resolve_for_plan(
    config: ReleaseConfig,
    plan_name: str,
    templates: Iterable[str],
    constants: ReleaseConstants | None,
    cli_values: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Resolution:
    return resolve(
        scan_required_variables(templates),
        plan_sources(config, plan_name, constants, cli_values, environ),
    )


def unassigned_error(plan_name: str, unassigned: Iterable[str]) -> ReleaseError:
    names = sorted(unassigned)
    flags = " ".join(f"--var {name}=..." for name in names)
    return ReleaseError(
        kind="unassigned_variables",
        message=f"Unassigned variables in plan '{plan_name}': {', '.join(names)}",
        hint=f"set them in .release.json env, the environment, or with {flags}",
    )


def parse_variable_assignments(items: Iterable[str]) -> Result[dict[str, str], ReleaseError]:
    """Parse repeated ``NAME=VALUE`` command-line assignments.

    The value may be empty and may contain ``=``; the last assignment of a
    name wins.
    """
    out: dict[str, str] = {}
    for item in items:
        if "=" not in item:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"invalid --var (expected NAME=VALUE): {item}",
                )
            )
        name, value = item.split("=", 1)
        name = name.strip()
        if not _ASSIGNMENT_NAME_RE.fullmatch(name):
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"invalid variable name in --var: {name!r}",
                    hint="names use letters, digits and underscores",
                )
            )
        out[name] = value
    return Ok(out)


def unassigned_in_config_plans(config: ReleaseConfig) -> dict[str, frozenset[str]]:
    """Variables each configured plan needs that config alone cannot supply.

    Built-in constants count as supplied, since the program always computes
    them before running a plan.
    """
    builtins = {name: "" for name in (*BUILTIN_VARIABLES, "NEXT_DEVELOPMENT_VERSION")}
    out: dict[str, frozenset[str]] = {}
    for name, plan in config.plans.items():
        resolution = resolve(
            scan_required_variables(plan.commands),
            (
                VariableSource(name=f"plans.{name}.env", values=plan.env),
                VariableSource(name="env", values=config.env),
                VariableSource(name="program", values=builtins),
            ),
        )
        if resolution.unassigned:
            out[name] = resolution.unassigned
    return out
