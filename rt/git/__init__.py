"""Git queries used by the release workflow.

Usage:
    from rt.git import Repository

    repo = Repository(Path.cwd())
    branch = repo.current_branch()
"""

from rt.git.repository import GitError, Repository

__all__ = ["GitError", "Repository"]
