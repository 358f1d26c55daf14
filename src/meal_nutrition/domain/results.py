"""Explicit success/failure results for upstream lookups."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FetchError:
    """Why an upstream lookup produced no usable value."""

    source: str
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Either a value or the error explaining its absence."""

    value: T | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        """Whether the lookup produced a value."""
        return self.value is not None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        """Wrap a successful value."""
        return cls(value=value)

    @classmethod
    def failure(
        cls, source: str, message: str, status_code: int | None = None
    ) -> "FetchResult[T]":
        """Build a failed result."""
        return cls(
            error=FetchError(source=source, message=message, status_code=status_code)
        )
