"""Backoff strategies that produce finite delay schedules.

A schedule is just a tuple of seconds; these strategies are a convenient way
to build one. Every strategy is iterable, so it can be handed straight to
``Reset`` or ``RetryPolicy``.

Example:
    >>> from manifail.execution.schedules import ExponentialBackoff
    >>>
    >>> backoff = ExponentialBackoff(max_retries=4, base_delay=0.5, jitter=False)
    >>> backoff.delays()
    (0.5, 1.0, 2.0, 4.0)
    >>> raise Reset(backoff)
"""

import random
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field

from manifail.execution.signals import Delays, _as_count, as_delays


class BackoffSchedule(ABC):
    """Abstract base for delay schedule strategies."""

    max_retries: int

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Calculate delay before a retry.

        Args:
            attempt: Zero-based attempt number (0 = first retry)

        Returns:
            Delay in seconds before that retry
        """
        ...

    def delays(self) -> Delays:
        """Materialise the whole schedule, one delay per permitted retry."""
        count = _as_count(self.max_retries, "max_retries")
        return as_delays(self.next_delay(attempt) for attempt in range(count))

    def __iter__(self) -> Iterator[float]:
        return iter(self.delays())

    def __len__(self) -> int:
        return _as_count(self.max_retries, "max_retries")


@dataclass(frozen=True)
class ExponentialBackoff(BackoffSchedule):
    """Exponential backoff with optional jitter.

    Delay = min(base_delay * (multiplier ** attempt), max_delay) + jitter

    Attributes:
        max_retries: Number of delays in the schedule
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds
        multiplier: Exponential multiplier (default: 2)
        jitter: Add randomness to prevent thundering herd
        jitter_range: Range of jitter as fraction of delay (0.0-1.0)
        seed: Seed for reproducible jitter (None = fresh randomness per schedule)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    multiplier: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.25
    seed: int | None = None

    def next_delay(self, attempt: int, rng: random.Random | None = None) -> float:
        """Calculate exponential backoff delay."""
        delay = min(
            self.base_delay * (self.multiplier ** attempt),
            self.max_delay,
        )

        if self.jitter:
            jitter_amount = delay * self.jitter_range
            delay += (rng or random).uniform(-jitter_amount, jitter_amount)
            delay = max(0, delay)

        return delay

    def delays(self) -> Delays:
        count = _as_count(self.max_retries, "max_retries")
        rng = random.Random(self.seed)
        return as_delays(self.next_delay(attempt, rng) for attempt in range(count))


@dataclass(frozen=True)
class LinearBackoff(BackoffSchedule):
    """Linear backoff strategy.

    Delay = min(base_delay + (increment * attempt), max_delay)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    increment: float = 1.0
    max_delay: float = 30.0

    def next_delay(self, attempt: int) -> float:
        """Calculate linear backoff delay."""
        return min(
            self.base_delay + (self.increment * attempt),
            self.max_delay,
        )


@dataclass(frozen=True)
class ConstantBackoff(BackoffSchedule):
    """Constant delay between retries."""

    max_retries: int = 3
    delay: float = 1.0

    def next_delay(self, attempt: int) -> float:
        """Return constant delay."""
        return self.delay


@dataclass(frozen=True)
class NoRetry(BackoffSchedule):
    """Empty schedule - the first Reset ends the run with RetriesExceeded(0)."""

    max_retries: int = field(default=0, init=False)

    def next_delay(self, attempt: int) -> float:
        return 0.0


__all__ = [
    "BackoffSchedule",
    "ConstantBackoff",
    "ExponentialBackoff",
    "LinearBackoff",
    "NoRetry",
]
