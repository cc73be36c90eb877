"""Thread the package filter in front of a host plugin step.

The host calls a plugin step with its configuration and a release context
holding every commit since the last release. Wrapping the step with
``with_only_package_commits`` makes it see only the commits that touched the
current package (or its configured dependencies):

    analyze = with_only_package_commits(analyze_commits)
    notes = with_only_package_commits(generate_notes)
    result = await analyze(plugin_config, context)

Wrapped steps share one file cache per repository, so the second step
reuses every lookup made by the first.

The wrapper runs two stages in order: the filtering stage (resolve package
scope, enrich commits with their files, keep matching ones), then the
reporting stage (log how many commits were found). Errors from either stage
are returned unchanged as ``Err``; the step is not called.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

from srm.commits.cache import CommitFilesCache
from srm.commits.enrich import enrich_commits
from srm.commits.membership import PackageRoots, filter_package_commits
from srm.commits.model import Commit, EnrichedCommit
from srm.core.config import DEFAULT_MAX_CONCURRENCY, PluginConfig
from srm.core.result import Err, Ok, Result
from srm.git.repository import GitError, Repository
from srm.output.console import ConsoleProtocol
from srm.package import ManifestError, read_package_name, resolve_package_scope

__all__ = [
    "FilterError",
    "OnlyPackageCommits",
    "PluginStep",
    "ReleaseContext",
    "commit_files_cache",
    "log_filtered_commit_count",
    "only_package_commits",
    "reset_commit_files_caches",
    "with_only_package_commits",
]

type FilterError = GitError | ManifestError


def _current_env() -> dict[str, str]:
    return dict(os.environ)


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """What the host passes to a plugin step.

    Attributes:
        cwd: Working directory of the release (inside the package)
        commits: Commits since the last release, newest first
        console: Output sink for trace and summary messages
        env: Environment of the release process (read for SRM_MAX_THREADS)
    """

    cwd: Path
    commits: tuple[Commit | EnrichedCommit, ...]
    console: ConsoleProtocol
    env: Mapping[str, str] = field(default_factory=_current_env)

    def with_commits(self, commits: Sequence[Commit | EnrichedCommit]) -> ReleaseContext:
        return replace(self, commits=tuple(commits))


type PluginStep[T] = Callable[[PluginConfig, ReleaseContext], Awaitable[T]]


def _as_commit(commit: Commit | EnrichedCommit) -> Commit:
    return commit.commit if isinstance(commit, EnrichedCommit) else commit


async def only_package_commits(
    roots: PackageRoots,
    commits: Sequence[Commit | EnrichedCommit],
    files: CommitFilesCache,
    console: ConsoleProtocol,
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> Result[list[EnrichedCommit], GitError]:
    """Enrich commits with their files and keep the ones in the package."""
    match await enrich_commits(
        [_as_commit(c) for c in commits],
        files.get,
        max_concurrency=max_concurrency,
    ):
        case Err(e):
            return Err(e)
        case Ok(enriched):
            return Ok(filter_package_commits(roots, enriched, console))


def log_filtered_commit_count(context: ReleaseContext, manifest: Path) -> Result[None, ManifestError]:
    """Report how many commits were kept for the package."""
    match read_package_name(manifest):
        case Err(e):
            return Err(e)
        case Ok(name):
            context.console.info(
                f"Found {len(context.commits)} commits for package {name} since last release"
            )
            return Ok(None)


_commit_files_caches: dict[Path, CommitFilesCache] = {}


def commit_files_cache(repo_root: Path) -> CommitFilesCache:
    """File cache shared by every wrapped step working on ``repo_root``."""
    cache = _commit_files_caches.get(repo_root)
    if cache is None:
        cache = CommitFilesCache(Repository(repo_root).commit_files)
        _commit_files_caches[repo_root] = cache
    return cache


def reset_commit_files_caches() -> None:
    """Drop every shared file cache."""
    _commit_files_caches.clear()


class OnlyPackageCommits[T]:
    """A plugin step that only sees the current package's commits.

    Unless given a cache of its own, file lookups go through the cache
    shared per repository root, so every wrapped step of a release looks
    each commit up once.
    """

    def __init__(self, step: PluginStep[T], cache: CommitFilesCache | None = None) -> None:
        self._step = step
        self._cache = cache

    def cache_for(self, repo_root: Path) -> CommitFilesCache:
        """File cache used for commits of the repository at ``repo_root``."""
        if self._cache is not None:
            return self._cache
        return commit_files_cache(repo_root)

    async def __call__(self, config: PluginConfig, context: ReleaseContext) -> Result[T, FilterError]:
        console = context.console

        # git rev-parse and manifest reads block; keep them off the event loop
        match await asyncio.to_thread(resolve_package_scope, context.cwd, config):
            case Err(e):
                return Err(e)
            case Ok(scope):
                pass

        console.debug(f'Filter commits by package path: "{scope.package_root}"')
        console.debug(f"Plugin config: {config}")

        match await only_package_commits(
            scope.roots,
            context.commits,
            self.cache_for(scope.repo_root),
            console,
            max_concurrency=config.concurrency_limit(context.env),
        ):
            case Err(git_error):
                return Err(git_error)
            case Ok(kept):
                filtered = context.with_commits(kept)

        match await asyncio.to_thread(log_filtered_commit_count, filtered, scope.manifest):
            case Err(manifest_error):
                return Err(manifest_error)
            case Ok(_):
                pass

        return Ok(await self._step(config, filtered))


def with_only_package_commits[T](
    step: PluginStep[T],
    cache: CommitFilesCache | None = None,
) -> OnlyPackageCommits[T]:
    """Wrap a plugin step so it receives only the current package's commits."""
    return OnlyPackageCommits(step, cache)
