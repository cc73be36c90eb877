"""Attach changed files to commits with bounded concurrency."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from srm.commits.model import Commit, EnrichedCommit
from srm.core.config import DEFAULT_MAX_CONCURRENCY
from srm.core.result import Err, Ok, Result
from srm.git.repository import GitError

__all__ = ["enrich_commits"]


async def enrich_commits(
    commits: Sequence[Commit],
    fetch: Callable[[str], Awaitable[Result[tuple[str, ...], GitError]]],
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> Result[list[EnrichedCommit], GitError]:
    """Look up the files of every commit.

    At most ``max_concurrency`` lookups are in flight; the rest wait for a
    slot. Output order is input order, whatever order lookups finish in.

    Args:
        commits: Commits to enrich
        fetch: File lookup, usually ``CommitFilesCache.get``
        max_concurrency: Maximum number of unresolved lookups

    Returns:
        Ok(enriched commits), or the first lookup error to come back.
        Lookups already running when an error arrives are left to finish.

    Raises:
        ValueError: If max_concurrency is less than 1.
    """
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")

    semaphore = asyncio.Semaphore(max_concurrency)

    async def with_files(commit: Commit) -> Result[EnrichedCommit, GitError]:
        async with semaphore:
            result = await fetch(commit.hash)
        match result:
            case Ok(files):
                return Ok(EnrichedCommit(commit=commit, files=files))
            case Err(e):
                return Err(e)

    tasks = [asyncio.ensure_future(with_files(commit)) for commit in commits]

    for next_done in asyncio.as_completed(tasks):
        result = await next_done
        if isinstance(result, Err):
            return result

    enriched: list[EnrichedCommit] = []
    for task in tasks:
        result = task.result()
        if isinstance(result, Ok):
            enriched.append(result.value)
    return Ok(enriched)
