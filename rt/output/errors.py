"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rt.core.errors import ErrorCode
from rt.output.console import Style
from rt.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from rt.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with its causes and hint."""
    console.error(error.message)
    for cause in error.causes:
        console.print(f"  - {cause.message}", Style.DIM)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "command_failed":
            return int(ErrorCode.COMMAND_ERROR)
        case "ci_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "manifest_error":
            return int(ErrorCode.IO_ERROR)
        case "invalid_config" | "dirty_worktree" | "git_failed":
            return int(ErrorCode.ENV_ERROR)
        case _:
            return int(ErrorCode.USER_ERROR)
