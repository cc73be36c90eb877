"""Commits command - list the commits that belong to the current package."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import typer

from srm.core.config import ConfigError, PluginConfig, load_plugin_config
from srm.core.errors import ErrorCode
from srm.core.result import Err, Ok
from srm.git.repository import GitError, Repository
from srm.output.console import ConsoleProtocol, RichConsole, Style
from srm.package import ManifestError
from srm.pipeline import ReleaseContext, with_only_package_commits


def _exit_code_for(error: ConfigError | GitError | ManifestError) -> ErrorCode:
    if isinstance(error, ConfigError):
        return ErrorCode.USER_ERROR
    if isinstance(error, ManifestError):
        return ErrorCode.ENV_ERROR
    return ErrorCode.GIT_ERROR


def _fail(console: ConsoleProtocol, error: ConfigError | GitError | ManifestError) -> typer.Exit:
    console.error(str(error))
    return typer.Exit(code=int(_exit_code_for(error)))


async def print_commits(config: PluginConfig, context: ReleaseContext) -> int:
    """Plugin step used by the CLI: print each kept commit."""
    for commit in context.commits:
        context.console.print(f"{commit.short_hash} {commit.subject}")
    return len(context.commits)


def commits(
    since: str | None = typer.Option(
        None,
        "--from",
        help="Only consider commits after this ref (e.g. the last release tag).",
    ),
    dependency: list[str] | None = typer.Option(
        None,
        "--dependency",
        "-d",
        help="Extra directory (relative to the repository root) whose changes count. Repeatable.",
    ),
    max_concurrency: int | None = typer.Option(
        None,
        "--max-concurrency",
        help="Maximum git lookups in flight (default: $SRM_MAX_THREADS or 500).",
    ),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Directory inside the package."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the filter trace."),
) -> None:
    """List commits that touched the current package or its dependencies."""
    console = RichConsole(verbose=verbose)
    env = dict(os.environ)

    options: dict[str, object] = {"dependencies": dependency or []}
    if max_concurrency is not None:
        options["maxConcurrency"] = max_concurrency

    match load_plugin_config(options):
        case Err(config_error):
            raise _fail(console, config_error)
        case Ok(config):
            pass

    revision_range = f"{since}..HEAD" if since else None
    match Repository(cwd).log(revision_range):
        case Err(git_error):
            raise _fail(console, git_error)
        case Ok(history):
            pass

    console.print(f"{len(history)} commits in range", Style.DIM)

    context = ReleaseContext(cwd=cwd, commits=tuple(history), console=console, env=env)
    step = with_only_package_commits(print_commits)

    match asyncio.run(step(config, context)):
        case Err(filter_error):
            raise _fail(console, filter_error)
        case Ok(_):
            pass
