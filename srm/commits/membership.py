"""Decide which commits belong to a package.

A commit belongs to the package when at least one file it touched lies under
the package root or under one of the configured dependency roots. "Under" is
a path-segment prefix test, so ``packages/foo`` never claims
``packages/foobar/index.js``.

Usage:
    roots = PackageRoots.create("packages/foo", ["shared/lib"])
    kept = filter_package_commits(roots, enriched_commits, console)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from srm.commits.model import EnrichedCommit
from srm.output.console import ConsoleProtocol
from srm.platform.paths import normalize_path, path_segments

__all__ = [
    "PackageRoots",
    "filter_package_commits",
    "is_under",
]


def is_under(root: Sequence[str], file: Sequence[str]) -> bool:
    """True if every segment of ``root`` equals the file segment at its index.

    A root with more segments than the file never matches.
    """
    if len(root) > len(file):
        return False
    return all(segment == file[i] for i, segment in enumerate(root))


@dataclass(frozen=True, slots=True)
class PackageRoots:
    """Normalized package root and dependency roots.

    Attributes:
        package_root: Package directory relative to the repository root
        dependency_roots: Extra directories treated like the package root
    """

    package_root: str
    dependency_roots: tuple[str, ...] = ()

    @classmethod
    def create(cls, package_root: str, dependency_roots: Iterable[str] = ()) -> PackageRoots:
        return cls(
            package_root=normalize_path(package_root),
            dependency_roots=tuple(normalize_path(d) for d in dependency_roots),
        )

    @property
    def package_segments(self) -> tuple[str, ...]:
        return path_segments(self.package_root)

    @property
    def dependency_segments(self) -> tuple[tuple[str, ...], ...]:
        return tuple(path_segments(d) for d in self.dependency_roots)

    def contains(self, file: str) -> bool:
        """True if the file is under the package root or any dependency root."""
        return self.matching_file((file,)) is not None

    def matching_file(self, files: Iterable[str]) -> str | None:
        """First file, in the given order, that belongs to the package."""
        package = self.package_segments
        dependencies = self.dependency_segments
        for file in files:
            segments = path_segments(file)
            if is_under(package, segments):
                return file
            if any(is_under(dep, segments) for dep in dependencies):
                return file
        return None


def filter_package_commits(
    roots: PackageRoots,
    commits: Iterable[EnrichedCommit],
    console: ConsoleProtocol | None = None,
) -> list[EnrichedCommit]:
    """Keep the commits that touched the package or one of its dependencies.

    Relative order is preserved. Each kept commit is traced to the console
    together with the file that qualified it.
    """
    if console is not None and roots.dependency_roots:
        console.debug(f"Dependency paths: {', '.join(roots.dependency_roots)}")

    kept: list[EnrichedCommit] = []
    for commit in commits:
        package_file = roots.matching_file(commit.files)
        if package_file is None:
            continue
        if console is not None:
            console.debug(
                f'Including commit "{commit.subject}" because it modified package file "{package_file}".'
            )
        kept.append(commit)
    return kept
