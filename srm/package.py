"""Locate the package being released and its place in the repository.

The package is identified by the nearest manifest (``package.json`` or
``pyproject.toml``) above the working directory; its root is the manifest's
directory, expressed relative to the git top level.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from srm.commits.membership import PackageRoots
from srm.core.config import PluginConfig
from srm.core.result import Err, Ok, Result
from srm.core.structured import StrDict, as_str_dict, get_str, get_table
from srm.git.repository import GitError, Repository
from srm.platform.paths import normalize_path

__all__ = [
    "MANIFEST_NAMES",
    "ManifestError",
    "PackageScope",
    "find_manifest",
    "package_path",
    "read_package_name",
    "resolve_package_scope",
]

# Checked in this order within each directory
MANIFEST_NAMES: tuple[str, ...] = ("package.json", "pyproject.toml")


@dataclass(frozen=True, slots=True)
class ManifestError:
    """Error when the package manifest cannot be found or read."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class PackageScope:
    """Everything resolved about the package for one filter run.

    Attributes:
        repo_root: Git top-level directory
        manifest: Path to the package manifest
        roots: Package root and dependency roots, relative to repo_root
    """

    repo_root: Path
    manifest: Path
    roots: PackageRoots

    @property
    def package_root(self) -> str:
        return self.roots.package_root


def find_manifest(start: Path, names: tuple[str, ...] = MANIFEST_NAMES) -> Result[Path, ManifestError]:
    """Find the nearest package manifest, walking up from ``start``."""
    start = start.resolve()
    for directory in (start, *start.parents):
        for name in names:
            candidate = directory / name
            if candidate.is_file():
                return Ok(candidate)
    return Err(
        ManifestError(
            f"No package manifest ({', '.join(names)}) found in {start} or its parents",
            path=start,
        )
    )


def _load_manifest(path: Path) -> Result[StrDict, ManifestError]:
    """Parse a JSON or TOML manifest into a string-keyed dict."""
    import tomllib

    try:
        content = path.read_bytes().decode("utf-8")
        data_obj: object = tomllib.loads(content) if path.suffix == ".toml" else json.loads(content)
    except FileNotFoundError:
        return Err(ManifestError(f"Manifest not found: {path}", path=path))
    except PermissionError:
        return Err(ManifestError(f"Permission denied reading: {path}", path=path))
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        return Err(ManifestError(f"Invalid manifest syntax in {path}: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ManifestError(f"Error reading manifest {path}: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ManifestError(f"Manifest root must be an object: {path}", path=path))
    return Ok(data)


def read_package_name(manifest: Path) -> Result[str, ManifestError]:
    """Read the declared package name from a manifest.

    ``package.json``: top-level ``name``. ``pyproject.toml``: ``[project].name``,
    falling back to ``[tool.poetry].name``.
    """
    match _load_manifest(manifest):
        case Err(e):
            return Err(e)
        case Ok(data):
            pass

    if manifest.suffix == ".toml":
        project = get_table(data, "project") or {}
        poetry = get_table(get_table(data, "tool") or {}, "poetry") or {}
        name = get_str(project, "name") or get_str(poetry, "name")
    else:
        name = get_str(data, "name")

    if name is None:
        return Err(ManifestError(f"Manifest declares no package name: {manifest}", path=manifest))
    return Ok(name)


def package_path(repo_root: Path, manifest: Path) -> Result[str, ManifestError]:
    """Package directory relative to the repository root, normalized."""
    package_dir = manifest.resolve().parent
    try:
        relative = package_dir.relative_to(repo_root.resolve())
    except ValueError:
        return Err(
            ManifestError(
                f"Package {package_dir} is outside the repository {repo_root}",
                path=manifest,
            )
        )
    return Ok(normalize_path(relative))


def resolve_package_scope(
    cwd: Path,
    config: PluginConfig,
    manifest_names: tuple[str, ...] = MANIFEST_NAMES,
) -> Result[PackageScope, ManifestError | GitError]:
    """Resolve the package root and dependency roots for the package at ``cwd``."""
    match find_manifest(cwd, manifest_names):
        case Err(e):
            return Err(e)
        case Ok(manifest):
            pass

    match Repository(cwd).root():
        case Err(git_error):
            return Err(git_error)
        case Ok(repo_root):
            pass

    match package_path(repo_root, manifest):
        case Err(e):
            return Err(e)
        case Ok(root):
            pass

    return Ok(
        PackageScope(
            repo_root=repo_root,
            manifest=manifest,
            roots=PackageRoots.create(root, config.dependencies),
        )
    )
