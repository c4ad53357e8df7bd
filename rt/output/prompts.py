"""Interactive prompting.

Like ``ConsoleProtocol``, prompting goes through a protocol so the release
workflow can be driven by a script in tests. Validators return a Result; the
message of an ``Err`` is shown to the operator and the question is asked
again. Any error type with a ``message`` will do.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from rt.core.result import Err, Result

__all__ = [
    "PromptRejection",
    "PrompterProtocol",
    "ScriptedPrompter",
    "TyperPrompter",
    "Validator",
]


class PromptRejection(Protocol):
    @property
    def message(self) -> str: ...


Validator = Callable[[str], Result[None, PromptRejection]]


class PrompterProtocol(Protocol):
    def text(self, message: str, *, validate: Validator, default: str | None = None) -> str:
        """Ask for a line of text until ``validate`` accepts it."""
        ...

    def secret(self, message: str, *, validate: Validator) -> str:
        """Like ``text`` but without echoing the answer."""
        ...

    def confirm(self, message: str, *, default: bool = False) -> bool: ...


class TyperPrompter:
    """Prompts on the terminal through typer (click)."""

    def text(self, message: str, *, validate: Validator, default: str | None = None) -> str:
        return self._ask(message, validate=validate, default=default, hide_input=False)

    def secret(self, message: str, *, validate: Validator) -> str:
        return self._ask(message, validate=validate, default=None, hide_input=True)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        import typer

        return typer.confirm(message, default=default)

    def _ask(
        self,
        message: str,
        *,
        validate: Validator,
        default: str | None,
        hide_input: bool,
    ) -> str:
        import typer

        while True:
            answer: str = typer.prompt(
                message,
                default=default,
                hide_input=hide_input,
                show_default=default is not None,
            )
            answer = answer.strip()
            checked = validate(answer)
            if isinstance(checked, Err):
                typer.secho(f">> {checked.error.message}", fg="red", err=True)
                continue
            return answer


@dataclass
class ScriptedPrompter:
    """Answers prompts from a script, for tests.

    Answers are consumed in order; ``None`` accepts the default.
    Rejected answers are recorded in ``rejections`` and the next answer is
    tried, mirroring the re-ask loop of the real prompter.
    """

    answers: deque[str | None] = field(default_factory=deque)
    confirmations: deque[bool | None] = field(default_factory=deque)
    asked: list[tuple[str, str]] = field(default_factory=list)
    rejections: list[str] = field(default_factory=list)

    @classmethod
    def of(
        cls,
        answers: Iterable[str | None] = (),
        confirmations: Iterable[bool | None] = (),
    ) -> ScriptedPrompter:
        return cls(answers=deque(answers), confirmations=deque(confirmations))

    def text(self, message: str, *, validate: Validator, default: str | None = None) -> str:
        self.asked.append(("text", message))
        while True:
            if not self.answers:
                raise AssertionError(f"unexpected prompt: {message}")
            answer = self.answers.popleft()
            if answer is None:
                if default is None:
                    raise AssertionError(f"prompt has no default: {message}")
                answer = default
            checked = validate(answer)
            if isinstance(checked, Err):
                self.rejections.append(checked.error.message)
                continue
            return answer

    def secret(self, message: str, *, validate: Validator) -> str:
        return self.text(message, validate=validate)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self.asked.append(("confirm", message))
        if not self.confirmations:
            raise AssertionError(f"unexpected confirmation: {message}")
        answer = self.confirmations.popleft()
        return default if answer is None else answer
