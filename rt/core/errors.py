"""Error codes for CLI exit status.

These values are used as process exit codes and should remain stable:
- 0: Success
- 1: User error (bad version, missing variable, unknown plan, abort)
- 2: Environment error (bad .release.json, dirty worktree, git failure)
- 3: Command error (a plan command exited non-zero)
- 4: Network error (CI trigger failed)
- 5: I/O error (manifest missing or unwritable)
"""

from enum import IntEnum

__all__ = ["ErrorCode", "INTERRUPTED_EXIT_CODE"]

# Conventional shell status for a process stopped by SIGINT.
INTERRUPTED_EXIT_CODE = 130


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    COMMAND_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
