"""Git queries needed before a release.

The tool never mutates the repository itself; plans do that. Here we only
ask questions: which branch is checked out, whether tracked files have
uncommitted edits, and which tags already exist.

Usage:
    repo = Repository(Path.cwd())
    match repo.tag_exists("1.2.0"):
        case Ok(True):
            print("pick another version")
        case Ok(False):
            pass
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.platform.process import ProcessError
from rt.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git working tree.

    Attributes:
        path: Path to the repository root (or any directory inside it)
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check for a .git directory (or a .git file for worktrees)."""
        return (self.path / ".git").exists()

    def current_branch(self) -> Result[str, GitError]:
        """Get the checked-out branch name.

        A detached HEAD is reported as ``HEAD``, the same way git does.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse", e, "Unable to get branch"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def has_uncommitted_changes(self) -> Result[bool, GitError]:
        """Check tracked files for unstaged or staged edits.

        Untracked files are ignored, like ``git diff`` ignores them.
        """
        for args in (["diff", "--quiet"], ["diff", "--cached", "--quiet"]):
            result = self._run(args)
            if isinstance(result, Ok):
                continue
            # git diff --quiet exits 1 when there are differences.
            if result.error.returncode == 1:
                return Ok(True)
            return Err(self._error("diff", result.error, "Unable to check for changes"))
        return Ok(False)

    def tags(self) -> Result[frozenset[str], GitError]:
        """List every tag in the repository."""
        result = self._run(["tag", "-l"])
        match result:
            case Err(e):
                return Err(self._error("tag", e, "Unable to list git tags"))
            case Ok(stdout):
                return Ok(frozenset(line.strip() for line in stdout.splitlines() if line.strip()))

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        tags = self.tags()
        if isinstance(tags, Err):
            return tags
        return Ok(tag in tags.value)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(["git", *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS)

    def _error(self, command: str, error: ProcessError, fallback: str) -> GitError:
        detail = error.stderr.strip()
        message = f"{fallback}: {detail}" if detail else fallback
        return GitError(command=command, message=message, returncode=error.returncode)
