"""Typed plugin configuration.

The host tool hands the plugin an untyped mapping. It is parsed once into a
frozen ``PluginConfig`` with its defaults applied at construction, so the
filtering code never has to probe for missing keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from srm.platform.paths import is_absolute, normalize_path

from .result import Err, Ok, Result
from .structured import parse_int

__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "MAX_THREADS_ENV",
    "ConfigError",
    "PluginConfig",
    "concurrency_from_env",
    "load_plugin_config",
]

# Upper bound of git lookups in flight at once
DEFAULT_MAX_CONCURRENCY = 500

MAX_THREADS_ENV = "SRM_MAX_THREADS"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the plugin configuration is malformed."""

    message: str
    key: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """Recognized plugin options.

    Attributes:
        dependencies: Extra directories, relative to the repository root,
            whose changes also count as changes to the package. Normalized.
        max_concurrency: Maximum number of commit file lookups in flight.
            None leaves the choice to the release environment.
    """

    dependencies: tuple[str, ...] = ()
    max_concurrency: int | None = None

    def __post_init__(self) -> None:
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {self.max_concurrency}")

    def concurrency_limit(self, env: Mapping[str, str]) -> int:
        """Lookups allowed in flight: the explicit option, else ``SRM_MAX_THREADS``."""
        if self.max_concurrency is not None:
            return self.max_concurrency
        return concurrency_from_env(env)


def concurrency_from_env(env: Mapping[str, str]) -> int:
    """Read the concurrency override from the environment.

    Missing, non-numeric and non-positive values fall back to the default.
    """
    value = parse_int(env.get(MAX_THREADS_ENV))
    if value is None or value < 1:
        return DEFAULT_MAX_CONCURRENCY
    return value


def _parse_dependencies(raw: object) -> Result[tuple[str, ...], ConfigError]:
    if raw is None:
        return Ok(())
    if not isinstance(raw, (list, tuple)):
        return Err(ConfigError("dependencies must be a list of paths", key="dependencies"))

    dependencies: list[str] = []
    for entry in raw:
        if not isinstance(entry, str) or not entry.strip():
            return Err(
                ConfigError(
                    f"dependencies entries must be non-empty strings, got {entry!r}",
                    key="dependencies",
                )
            )
        if is_absolute(entry.strip()):
            return Err(
                ConfigError(
                    f"dependency path must be relative to the repository root: {entry}",
                    key="dependencies",
                )
            )
        normalized = normalize_path(entry.strip())
        # "." would match every file; ".." escapes the repository and matches none
        if normalized == "." or normalized == ".." or normalized.startswith("../"):
            return Err(
                ConfigError(
                    f"dependency path must name a directory inside the repository: {entry}",
                    key="dependencies",
                )
            )
        dependencies.append(normalized)
    return Ok(tuple(dependencies))


def load_plugin_config(data: Mapping[str, object] | None) -> Result[PluginConfig, ConfigError]:
    """Build a PluginConfig from the host's plugin options.

    Args:
        data: Plugin options as supplied by the host (may be None).

    Returns:
        Ok(PluginConfig) on success, Err(ConfigError) on malformed options.
        Without ``maxConcurrency`` the limit is left unset, so the release
        environment (``SRM_MAX_THREADS``) decides at run time.
    """
    data = data or {}

    match _parse_dependencies(data.get("dependencies")):
        case Err(e):
            return Err(e)
        case Ok(dependencies):
            pass

    raw_limit = data.get("maxConcurrency", data.get("max_concurrency"))
    if raw_limit is None:
        return Ok(PluginConfig(dependencies=dependencies))

    max_concurrency = parse_int(raw_limit)
    if max_concurrency is None or max_concurrency < 1:
        return Err(
            ConfigError(
                f"maxConcurrency must be a positive integer, got {raw_limit!r}",
                key="maxConcurrency",
            )
        )
    return Ok(PluginConfig(dependencies=dependencies, max_concurrency=max_concurrency))
