"""Commit records flowing through the filter."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["Commit", "EnrichedCommit"]


def _empty_metadata() -> dict[str, object]:
    return {}


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as produced by the host tool.

    Attributes:
        hash: Full commit hash
        subject: First line of the commit message
        metadata: Any other host-supplied fields, passed through untouched
    """

    hash: str
    subject: str = ""
    metadata: dict[str, object] = field(default_factory=_empty_metadata)

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True, slots=True)
class EnrichedCommit:
    """A commit together with the files it modified.

    Attributes:
        commit: The original commit
        files: Paths relative to the repository root, in git's order
    """

    commit: Commit
    files: tuple[str, ...] = ()

    @property
    def hash(self) -> str:
        return self.commit.hash

    @property
    def subject(self) -> str:
        return self.commit.subject

    @property
    def metadata(self) -> dict[str, object]:
        return self.commit.metadata

    @property
    def short_hash(self) -> str:
        return self.commit.short_hash
