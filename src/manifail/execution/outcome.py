"""
Terminal outcomes of a retry run.

The driver returns exactly one of three values per run, never raising for an
expected ending:

    ┌─────────────────┬──────────────────────┬──────────────────────────┐
    │  Success[T]     │  Aborted             │  Failed                  │
    ├─────────────────┼──────────────────────┼──────────────────────────┤
    │ • value: T      │ • signal: Abort      │ • signal: RetriesExceeded│
    │ • attempt       │ • attempt            │ • attempt                │
    │                 │ • value / cause      │ • retries / value / cause│
    └─────────────────┴──────────────────────┴──────────────────────────┘

``Outcome`` is the union of the three, so callers can ``match`` on it:

    >>> match driver.run(fetch):
    ...     case Success(value):
    ...         store(value)
    ...     case Aborted() as aborted:
    ...         log.warning("fetch_aborted", reason=aborted.value)
    ...     case Failed() as failed:
    ...         log.error("fetch_exhausted", retries=failed.retries)

``unwrap()`` bridges back to exception style: it returns the value of a
``Success`` and raises the carried signal otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from manifail.execution.signals import Abort, RetriesExceeded

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """The work completed normally after ``attempt`` retries."""

    value: T
    attempt: int = 0

    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Get the value. Safe for Success."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"outcome": "success", "attempt": self.attempt, "value": self.value}

    def __repr__(self) -> str:
        return f"Success({self.value!r}, attempt={self.attempt})"


@dataclass(frozen=True, slots=True)
class Aborted:
    """The work (or a cancellation) demanded termination."""

    signal: Abort
    attempt: int = 0

    @property
    def value(self) -> Any:
        return self.signal.value

    @property
    def cause(self) -> BaseException | None:
        return self.signal.cause

    def is_success(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the Abort signal."""
        raise self.signal

    def unwrap_or(self, default: Any) -> Any:
        return default

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": "aborted", "attempt": self.attempt, **self.signal.to_dict()}

    def __repr__(self) -> str:
        return f"Aborted({self.signal!r}, attempt={self.attempt})"


@dataclass(frozen=True, slots=True)
class Failed:
    """The retry budget was exhausted."""

    signal: RetriesExceeded
    attempt: int = 0

    @property
    def retries(self) -> int:
        return self.signal.retries

    @property
    def value(self) -> Any:
        return self.signal.value

    @property
    def cause(self) -> BaseException | None:
        return self.signal.cause

    def is_success(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the RetriesExceeded signal."""
        raise self.signal

    def unwrap_or(self, default: Any) -> Any:
        return default

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": "failed", "attempt": self.attempt, **self.signal.to_dict()}

    def __repr__(self) -> str:
        return f"Failed({self.signal!r}, attempt={self.attempt})"


Outcome = Success[T] | Aborted | Failed


__all__ = ["Aborted", "Failed", "Outcome", "Success"]
