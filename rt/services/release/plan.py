"""Plans: ordered command sequences.

A plan runs its commands one at a time. The next command starts only after
the previous one exited 0; the first failure stops the plan and is returned
to the caller. Nothing already done is rolled back.

Lifecycle: CREATED -> RUNNING -> SUCCEEDED | FAILED. A plan runs at most
once; use ``fresh()`` to get a runnable copy.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.output.console import ConsoleProtocol
from rt.services.release.command import Command, parse_command
from rt.services.release.errors import ReleaseError


class PlanState(Enum):
    CREATED = "created"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PlanState.SUCCEEDED, PlanState.FAILED)


class Plan:
    """A named, immutable sequence of commands.

    Attributes:
        name: Plan name ("release", "development", "publish", ...)
        commands: Parsed commands, in execution order
        templates: The template strings the commands were parsed from
    """

    __slots__ = ("name", "commands", "templates", "_state")

    def __init__(self, name: str, commands: Sequence[Command], templates: Sequence[str]) -> None:
        self.name = name
        self.commands: tuple[Command, ...] = tuple(commands)
        self.templates: tuple[str, ...] = tuple(templates)
        self._state = PlanState.CREATED

    @property
    def state(self) -> PlanState:
        return self._state

    def fresh(self) -> Plan:
        """Return a new, runnable plan with the same commands."""
        return Plan(self.name, self.commands, self.templates)

    def run(
        self,
        variables: Mapping[str, str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        console: ConsoleProtocol | None = None,
    ) -> Result[None, ReleaseError]:
        """Substitute variables, then execute every command in order.

        Substitution happens for all commands before the first one starts,
        so a missing variable never leaves the plan half done.

        Args:
            variables: Resolved variable values (read only).
            cwd: Working directory for every command.
            env: Environment for the children (inherits ours when None).
            console: Echoes each command before it runs.
        """
        if self._state is not PlanState.CREATED:
            return Err(
                ReleaseError(
                    kind="plan_consumed",
                    message=f"Plan '{self.name}' has already been run ({self._state.value})",
                    hint="build a fresh plan to retry",
                )
            )
        self._state = PlanState.RUNNING

        resolved: list[Command] = []
        for command in self.commands:
            substituted = command.substitute(variables)
            if isinstance(substituted, Err):
                self._state = PlanState.FAILED
                return substituted
            resolved.append(substituted.value)

        for command in resolved:
            if console is not None:
                console.command(command.describe())
            executed = command.execute(cwd=cwd, env=env)
            if isinstance(executed, Err):
                self._state = PlanState.FAILED
                return executed

        self._state = PlanState.SUCCEEDED
        return Ok(None)

    def describe(self, variables: Mapping[str, str] | None = None) -> list[str]:
        """Render the command lines for confirmation.

        With ``variables`` the lines show substituted values; a command whose
        variables cannot all be resolved is shown as its template.
        """
        lines: list[str] = []
        for command in self.commands:
            if variables is not None:
                substituted = command.substitute(variables)
                if isinstance(substituted, Ok):
                    lines.append(substituted.value.describe())
                    continue
            lines.append(command.describe())
        return lines

    def __len__(self) -> int:
        return len(self.commands)

    def __repr__(self) -> str:
        return f"Plan({self.name!r}, {len(self.commands)} commands, {self._state.value})"


def build_plan(name: str, templates: Sequence[str]) -> Result[Plan, ReleaseError]:
    """Parse every template up front; the first malformed one fails the plan."""
    commands: list[Command] = []
    for index, template in enumerate(templates):
        parsed = parse_command(template)
        if isinstance(parsed, Err):
            error = parsed.error
            return Err(
                ReleaseError(
                    kind=error.kind,
                    message=f"Plan '{name}', command {index + 1}: {error.message}",
                    hint=error.hint,
                )
            )
        commands.append(parsed.value)
    return Ok(Plan(name, commands, templates))
