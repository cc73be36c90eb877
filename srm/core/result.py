"""Result type for explicit error handling.

Operations that talk to git or read manifests return ``Ok(value)`` or
``Err(error)`` instead of raising, so a failed lookup travels up the
pipeline as a value and reaches the host untouched.

Usage:
    match await cache.get(commit_hash):
        case Ok(files):
            print(f"{len(files)} files")
        case Err(error):
            print(f"lookup failed: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def unwrap(self) -> T:
        """Returns the contained value."""
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result.

    Attributes:
        error: The error payload.
    """

    error: E

    def unwrap(self) -> None:
        """Raises ValueError with the error.

        Raises:
            ValueError: Always, containing the error.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
