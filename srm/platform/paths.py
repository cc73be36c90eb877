"""Repository-relative path utilities.

Git reports changed files with ``/`` separators whatever the host OS, while
paths computed locally (package roots) use the platform separator. Everything
that gets compared is first normalized here to a single POSIX form.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import PurePath, PureWindowsPath

__all__ = [
    "is_absolute",
    "normalize_path",
    "path_segments",
]


def normalize_path(path: str | PurePath) -> str:
    """Normalize a repository-relative path.

    Converts backslashes and the platform separator to ``/``, resolves
    ``.``/``..`` segments and drops trailing separators. The repository
    root itself normalizes to ``"."``.

    Examples:
        >>> normalize_path("packages/foo/")
        'packages/foo'
        >>> normalize_path("./packages/foo/../bar/x.js")
        'packages/bar/x.js'
    """
    if isinstance(path, PurePath):
        path = path.as_posix()
    path = path.replace("\\", "/")
    if os.sep != "/":
        path = path.replace(os.sep, "/")
    if not path:
        return "."
    return posixpath.normpath(path)


def path_segments(path: str | PurePath) -> tuple[str, ...]:
    """Split a path into its directory/file name components.

    The repository root (``"."``) has no segments.
    """
    normalized = normalize_path(path)
    if normalized == ".":
        return ()
    return tuple(normalized.split("/"))


def is_absolute(path: str) -> bool:
    """True for POSIX absolute paths and Windows drive/UNC paths."""
    return path.startswith(("/", "\\")) or PureWindowsPath(path).is_absolute()
