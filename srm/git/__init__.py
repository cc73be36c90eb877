"""Git operations module.

Usage:
    from srm.git import Repository

    repo = Repository(Path.cwd())
    top = repo.root()
    files = await repo.commit_files(commit_hash)
"""

from srm.git.repository import (
    GitError,
    Repository,
)

__all__ = [
    "GitError",
    "Repository",
]
