"""Memoized commit file lookups.

``git diff-tree`` is the expensive part of filtering, and the host may hand
the same commits to several plugin steps. ``CommitFilesCache`` remembers the
file list of every commit it has resolved and collapses concurrent requests
for the same commit into a single lookup.

Usage:
    cache = CommitFilesCache(Repository(root).commit_files)

    files = await cache.get(commit_hash)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from srm.core.result import Ok, Result
from srm.git.repository import GitError

__all__ = ["CommitFiles", "CommitFilesCache", "CommitFilesLookup"]

type CommitFiles = Result[tuple[str, ...], GitError]
type CommitFilesLookup = Callable[[str], Awaitable[CommitFiles]]


class CommitFilesCache:
    """Cache of commit hash -> modified files.

    Entries are write-once and never evicted: a commit hash always maps to
    the same files. Failed lookups are handed to every caller waiting on
    them but are not stored.

    Attributes:
        lookups: Number of lookups issued to the underlying function
    """

    def __init__(self, lookup: CommitFilesLookup) -> None:
        self._lookup = lookup
        self._files: dict[str, tuple[str, ...]] = {}
        self._pending: dict[str, asyncio.Task[CommitFiles]] = {}
        self.lookups = 0

    async def get(self, commit_hash: str) -> CommitFiles:
        """Get the files modified by a commit, looking them up at most once."""
        files = self._files.get(commit_hash)
        if files is not None:
            return Ok(files)

        task = self._pending.get(commit_hash)
        if task is None:
            task = asyncio.ensure_future(self._load(commit_hash))
            self._pending[commit_hash] = task
        return await asyncio.shield(task)

    async def _load(self, commit_hash: str) -> CommitFiles:
        self.lookups += 1
        try:
            result = await self._lookup(commit_hash)
        finally:
            self._pending.pop(commit_hash, None)
        if isinstance(result, Ok):
            self._files.setdefault(commit_hash, result.value)
        return result

    def reset(self) -> None:
        """Forget every resolved commit."""
        self._files.clear()

    def __contains__(self, commit_hash: object) -> bool:
        return commit_hash in self._files

    def __len__(self) -> int:
        return len(self._files)
