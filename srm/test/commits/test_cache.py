"""Tests for srm.commits.cache."""

from __future__ import annotations

import asyncio

import pytest

from srm.commits.cache import CommitFiles, CommitFilesCache
from srm.core.result import Err, Ok
from srm.git.repository import GitError


class FakeLookup:
    """Records calls and answers from a fixed table."""

    def __init__(self, files: dict[str, tuple[str, ...]], *, delay: float = 0.0) -> None:
        self.files = files
        self.delay = delay
        self.calls: list[str] = []

    async def __call__(self, commit_hash: str) -> CommitFiles:
        self.calls.append(commit_hash)
        await asyncio.sleep(self.delay)
        if commit_hash not in self.files:
            return Err(GitError(command=f"diff-tree {commit_hash}", message="bad object", returncode=128))
        return Ok(self.files[commit_hash])


class TestCommitFilesCache:
    @pytest.mark.asyncio
    async def test_second_get_does_not_look_up_again(self) -> None:
        lookup = FakeLookup({"a": ("packages/foo/index.js",)})
        cache = CommitFilesCache(lookup)

        first = await cache.get("a")
        second = await cache.get("a")

        assert first == Ok(("packages/foo/index.js",))
        assert second == first
        assert lookup.calls == ["a"]
        assert cache.lookups == 1
        assert "a" in cache
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_concurrent_gets_share_one_lookup(self) -> None:
        lookup = FakeLookup({"a": ("x.js",)}, delay=0.01)
        cache = CommitFilesCache(lookup)

        results = await asyncio.gather(*(cache.get("a") for _ in range(5)))

        assert all(r == Ok(("x.js",)) for r in results)
        assert lookup.calls == ["a"]

    @pytest.mark.asyncio
    async def test_distinct_hashes_are_looked_up_separately(self) -> None:
        lookup = FakeLookup({"a": ("a.js",), "b": ("b.js",)})
        cache = CommitFilesCache(lookup)

        await asyncio.gather(cache.get("a"), cache.get("b"))

        assert sorted(lookup.calls) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_is_returned_but_not_stored(self) -> None:
        lookup = FakeLookup({})
        cache = CommitFilesCache(lookup)

        first = await cache.get("missing")
        assert isinstance(first, Err)
        assert first.error.returncode == 128
        assert "missing" not in cache

        second = await cache.get("missing")
        assert isinstance(second, Err)
        assert lookup.calls == ["missing", "missing"]

    @pytest.mark.asyncio
    async def test_concurrent_waiters_share_failure(self) -> None:
        lookup = FakeLookup({}, delay=0.01)
        cache = CommitFilesCache(lookup)

        results = await asyncio.gather(cache.get("missing"), cache.get("missing"))

        assert all(isinstance(r, Err) for r in results)
        assert lookup.calls == ["missing"]

    @pytest.mark.asyncio
    async def test_reset_forgets_entries(self) -> None:
        lookup = FakeLookup({"a": ("a.js",)})
        cache = CommitFilesCache(lookup)

        await cache.get("a")
        cache.reset()
        assert len(cache) == 0

        await cache.get("a")
        assert lookup.calls == ["a", "a"]

    def test_survives_separate_event_loops(self) -> None:
        lookup = FakeLookup({"a": ("a.js",)})
        cache = CommitFilesCache(lookup)

        asyncio.run(cache.get("a"))
        result = asyncio.run(cache.get("a"))

        assert result == Ok(("a.js",))
        assert lookup.calls == ["a"]
