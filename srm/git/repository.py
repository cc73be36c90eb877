"""Git repository abstraction.

Read-only queries the commit filter needs: the repository top level, the
files touched by a commit, and the commit log used by the CLI host. All
operations return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.root():
        case Ok(top):
            print(f"Top level: {top}")
        case Err(e):
            print(f"Error: {e.message}")

    match await repo.commit_files("3f2a9c1"):
        case Ok(files):
            print("\\n".join(files))
        case Err(e):
            print(f"diff-tree failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from srm.commits.model import Commit
from srm.core.result import Err, Ok, Result
from srm.platform.process import ProcessError, run, run_async

_GIT_TIMEOUT_SECONDS = 30.0

# Field/record separators for `git log --format`
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command}: {self.message}"


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Any directory inside the working tree
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def root(self) -> Result[Path, GitError]:
        """Get the top-level directory of the working tree.

        Runs `git rev-parse --show-toplevel`.
        """
        match self._run(["rev-parse", "--show-toplevel"]):
            case Err(e):
                return Err(_git_error("rev-parse --show-toplevel", e, "not a git repository"))
            case Ok(stdout):
                return Ok(Path(stdout.strip()))

    async def commit_files(self, commit_hash: str) -> Result[tuple[str, ...], GitError]:
        """List the files modified by a commit, relative to the repository root.

        Runs `git diff-tree --root --no-commit-id --name-only -z -r <hash>`.
        The root commit is diffed against the empty tree; merge commits
        report no files.
        """
        args = ["diff-tree", "--root", "--no-commit-id", "--name-only", "-z", "-r", commit_hash]
        match await run_async(["git", "-C", str(self.path), *args], cwd=self.path):
            case Err(e):
                return Err(_git_error(f"diff-tree {commit_hash}", e, "diff-tree failed"))
            case Ok(stdout):
                return Ok(tuple(name for name in stdout.split("\0") if name))

    def log(self, revision_range: str | None = None) -> Result[list[Commit], GitError]:
        """List commits reachable from HEAD (or within a range), newest first.

        Args:
            revision_range: e.g. "v1.2.0..HEAD"; None for the whole history
        """
        args = ["log", f"--format=%H{_FIELD_SEP}%s{_FIELD_SEP}%an{_RECORD_SEP}"]
        if revision_range:
            args.append(revision_range)
        match self._run(args):
            case Err(e):
                return Err(_git_error("log", e, "log failed"))
            case Ok(stdout):
                return Ok(self._parse_log(stdout))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run(["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS)

    def _parse_log(self, output: str) -> list[Commit]:
        commits: list[Commit] = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record:
                continue
            fields = record.split(_FIELD_SEP)
            if len(fields) < 2:
                continue
            commit_hash, subject = fields[0], fields[1]
            metadata: dict[str, object] = {}
            if len(fields) > 2:
                metadata["author"] = fields[2]
            commits.append(Commit(hash=commit_hash, subject=subject, metadata=metadata))
        return commits
