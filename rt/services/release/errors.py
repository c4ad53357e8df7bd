from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    # version rules
    "invalid_version",
    "not_development_version",
    "has_prerelease",
    "not_release_candidate",
    "not_release_or_candidate",
    "tag_exists",
    # commands and plans
    "malformed_command",
    "unresolved_variable",
    "unassigned_variables",
    "command_failed",
    "plan_not_found",
    "plan_consumed",
    # orchestration
    "invalid_input",
    "invalid_config",
    "aborted",
    "dirty_worktree",
    "git_failed",
    "manifest_error",
    "ci_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical error payload for the release workflow.

    ``returncode`` is set for ``command_failed``. ``causes`` holds the
    underlying errors when one check is the combination of others.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    returncode: int | None = None
    causes: tuple[ReleaseError, ...] = ()

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
