"""Success/failure container returned by every client operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .errors import GeocoreError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Either a value (success) or a ``GeocoreError`` (failure), never both.
    Use the ``success``/``failure`` constructors rather than the raw fields.
    """

    value: Optional[T] = None
    error: Optional[GeocoreError] = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("Result cannot hold both a value and an error.")
        if self.error is not None and not isinstance(self.error, GeocoreError):
            raise TypeError(
                f"Result error must be a GeocoreError, got {type(self.error).__name__}"
            )

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: GeocoreError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @property
    def is_success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def propagate_to(
        self,
        fulfill: Callable[[T], Any],
        reject: Callable[[GeocoreError], Any],
    ) -> None:
        """Route this result to exactly one of ``fulfill`` or ``reject``."""
        if self.error is not None:
            reject(self.error)
        else:
            fulfill(self.value)  # type: ignore[arg-type]


__all__ = ["Result"]
