"""Platform helpers: subprocess execution and path normalization."""

from srm.platform.paths import is_absolute, normalize_path, path_segments
from srm.platform.process import ProcessError, run, run_async

__all__ = [
    "ProcessError",
    "is_absolute",
    "normalize_path",
    "path_segments",
    "run",
    "run_async",
]
