"""Error codes for CLI exit status.

The filtering pipeline itself reports failures as ``Err`` payloads; these
codes only decide how the ``srm`` command exits when one reaches it.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad options or plugin configuration)
    - 2: Environment error (not in a git repository, no package manifest)
    - 3: Git error (a git command failed, unknown commit)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")
