"""A single shell command template.

Templates are lexed with POSIX shell rules (``shlex``) into a program name
and its arguments. No shell is involved at execution time: pipes, globs and
redirections are passed through as literal arguments.

``\\$`` in a template stands for a literal dollar sign. It is carried through
lexing as a private marker so that substitution can never touch it, and it
becomes ``$`` only in the final argv.
"""

from __future__ import annotations

import re
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.platform.process import run_interactive
from rt.services.release.errors import ReleaseError
from rt.services.release.variables import VARIABLE_RE

_LITERAL_DOLLAR = "\ue000"


@dataclass(frozen=True, slots=True)
class Command:
    """An immutable argv template.

    Attributes:
        tokens: Program name followed by its arguments, placeholders intact.
        resolved: True once variables have been substituted.
    """

    tokens: tuple[str, ...]
    resolved: bool = False

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> Result[Command, ReleaseError]:
        """Build a command from an already split argument list."""
        if not tokens:
            return Err(ReleaseError(kind="malformed_command", message="Empty command"))
        return Ok(cls(tokens=tuple(t.replace("\\$", _LITERAL_DOLLAR) for t in tokens)))

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def argv(self) -> list[str]:
        """Arguments as they are handed to the operating system."""
        return [t.replace(_LITERAL_DOLLAR, "$") for t in self.tokens]

    def substitute(self, variables: Mapping[str, str]) -> Result[Command, ReleaseError]:
        """Replace every ``$NAME`` / ``${NAME}`` in every token.

        A command that is already resolved is returned as is, so values that
        happen to contain ``$`` are never expanded a second time.
        """
        if self.resolved:
            return Ok(self)

        missing: list[str] = []

        def lookup(m: re.Match[str]) -> str:
            name = m.group(1) or m.group(2)
            if name not in variables:
                missing.append(name)
                return m.group(0)
            return variables[name]

        tokens = tuple(VARIABLE_RE.sub(lookup, token) for token in self.tokens)
        if missing:
            names = ", ".join(sorted(set(missing)))
            return Err(
                ReleaseError(
                    kind="unresolved_variable",
                    message=f"Unresolved variable {names} in: {self.describe()}",
                )
            )
        return Ok(replace(self, tokens=tokens, resolved=True))

    def execute(
        self,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[None, ReleaseError]:
        """Run the command attached to the terminal and wait for it."""
        result = run_interactive(self.argv, cwd=cwd, env=env)
        if isinstance(result, Ok):
            return Ok(None)

        error = result.error
        if not error.started:
            message = f"{self.program} could not be started: {error.stderr}"
        elif error.returncode < 0:
            message = f"{self.program} was killed by signal {-error.returncode}"
        else:
            message = f"{self.program} exited with code {error.returncode}"
        return Err(
            ReleaseError(
                kind="command_failed",
                message=message,
                hint=self.describe(),
                returncode=error.returncode,
            )
        )

    def describe(self) -> str:
        """Render the command as a shell line.

        Before substitution, literal dollars are shown escaped (``\\$``) so the
        line can be parsed back into the same command.
        """
        if self.resolved:
            return shlex.join(self.argv)
        return shlex.join(t.replace(_LITERAL_DOLLAR, "\\$") for t in self.tokens)

    def __str__(self) -> str:
        return self.describe()


def parse_command(template: str) -> Result[Command, ReleaseError]:
    """Lex a template string into a Command."""
    try:
        tokens = shlex.split(template.replace("\\$", _LITERAL_DOLLAR), posix=True)
    except ValueError as e:
        return Err(
            ReleaseError(
                kind="malformed_command",
                message=f"Malformed command ({e}): {template}",
            )
        )
    if not tokens:
        return Err(ReleaseError(kind="malformed_command", message=f"Empty command: {template!r}"))
    return Ok(Command(tokens=tuple(tokens)))
