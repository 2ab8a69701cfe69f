"""
Retry control-flow signals.

A unit of work talks to the retry driver through a small, closed vocabulary
of signals. They are raised (or returned) by the work and interpreted by
:class:`manifail.execution.driver.RetryDriver`; they are never errors in their
own right.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                          Signal                              │
        │              value | cause  (at most one of them)            │
        ├───────────────┬───────────────┬───────────────┬─────────────┤
        │ Abort         │ Reset         │ Retried       │ Retries-    │
        │               │ delays        │ attempt       │ Exceeded    │
        │ stop now      │ retry after   │ delay         │ retries     │
        │               │ delays[0]     │ (driver only) │ (terminal)  │
        └───────────────┴───────────────┴───────────────┴─────────────┘

    - value and cause are mutually exclusive; ``None`` means absent.
    - A cause is chained as ``__cause__`` and kept by reference.
    - Delay schedules are normalised to immutable tuples of float seconds.
    - Every field is read-only; equality is structural.

Examples:
    Stop immediately, carrying a value back to the caller:

    >>> raise Abort("quota exhausted")

    Ask for a retry, renegotiating the remaining schedule:

    >>> raise Reset([0.5, 1.0, 2.0], cause=exc)

    Keep using whatever schedule the driver still has:

    >>> raise Reset()

    Construction is validated:

    >>> Reset([-1])
    Traceback (most recent call last):
    ...
    manifail.core.errors.InvalidSignalError: delay at index 0 must be non-negative, got -1.0

Guardrails:
    ❌ DON'T: Raise Retried from work, it is emitted by the driver only
    ✅ DO: Raise Reset to ask for another attempt

    ❌ DON'T: Pass both value= and cause=
    ✅ DO: Pick the one the caller needs to see
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import timedelta
from itertools import islice
from numbers import Real
from typing import Any

from manifail.core.errors import InvalidSignalError, SignalErrorKind

Delays = tuple[float, ...]

# Upper bound on schedule length; guards against unbounded iterators.
MAX_SCHEDULE_LENGTH = 10_000


# =============================================================================
# VALIDATION HELPERS
# =============================================================================


def _as_seconds(delay: Any, where: str) -> float:
    if isinstance(delay, timedelta):
        seconds = delay.total_seconds()
    elif isinstance(delay, bool) or not isinstance(delay, Real):
        raise InvalidSignalError(
            f"{where} must be a number of seconds or a timedelta, got {type(delay).__name__}",
            kind=SignalErrorKind.INVALID_DELAY,
        )
    else:
        seconds = float(delay)

    if not math.isfinite(seconds):
        raise InvalidSignalError(
            f"{where} must be finite, got {seconds}",
            kind=SignalErrorKind.INVALID_DELAY,
        )
    if seconds < 0:
        raise InvalidSignalError(
            f"{where} must be non-negative, got {seconds}",
            kind=SignalErrorKind.INVALID_DELAY,
        )
    return seconds


def _as_count(count: Any, name: str) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidSignalError(
            f"{name} must be an int, got {type(count).__name__}",
            kind=SignalErrorKind.INVALID_RETRY_COUNT,
        )
    if count < 0:
        raise InvalidSignalError(
            f"{name} must be non-negative, got {count}",
            kind=SignalErrorKind.INVALID_RETRY_COUNT,
        )
    return count


def as_delays(delays: Iterable[float | timedelta]) -> Delays:
    """
    Normalise a delay schedule to an immutable tuple of float seconds.

    Accepts any finite iterable of non-negative numbers or ``timedelta``
    values, including the backoff schedules in
    :mod:`manifail.execution.schedules`. The input is copied, so later
    mutation of a list passed in never affects the result. At most
    ``MAX_SCHEDULE_LENGTH`` entries are read, so an endless iterator such as
    ``itertools.count()`` is rejected instead of consumed forever.

    Raises:
        InvalidSignalError: kind ``InvalidDelay`` for a negative, non-finite
            or non-numeric entry, when ``delays`` is not an iterable, or when
            it yields more than ``MAX_SCHEDULE_LENGTH`` entries.

    Examples:
        >>> as_delays([1, timedelta(milliseconds=250)])
        (1.0, 0.25)
        >>> as_delays(())
        ()
    """
    if isinstance(delays, (str, bytes)) or not isinstance(delays, Iterable):
        raise InvalidSignalError(
            f"delays must be an iterable of durations, got {type(delays).__name__}",
            kind=SignalErrorKind.INVALID_DELAY,
        )
    schedule = tuple(
        _as_seconds(delay, f"delay at index {index}")
        for index, delay in enumerate(islice(delays, MAX_SCHEDULE_LENGTH + 1))
    )
    if len(schedule) > MAX_SCHEDULE_LENGTH:
        raise InvalidSignalError(
            f"delay schedule must be finite and at most {MAX_SCHEDULE_LENGTH} entries long",
            kind=SignalErrorKind.INVALID_DELAY,
        )
    return schedule


# =============================================================================
# SIGNALS
# =============================================================================


class Signal(Exception):
    """
    Base of the closed retry signal vocabulary.

    Only ``Abort``, ``Reset``, ``Retried`` and ``RetriesExceeded`` derive from
    it directly; the driver matches on exactly those four. Subclassing one of
    the variants is allowed (it stays that variant), adding a fifth is not,
    and ``Signal`` itself cannot be instantiated.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if Signal in cls.__bases__ and cls.__module__ != __name__:
            raise TypeError(
                f"cannot derive {cls.__name__} from Signal: the vocabulary is closed, "
                "subclass Abort, Reset, Retried or RetriesExceeded instead"
            )

    def __new__(cls, *args: Any, **kwargs: Any) -> Signal:
        if cls is Signal:
            raise TypeError(
                "Signal cannot be instantiated directly, "
                "use Abort, Reset, Retried or RetriesExceeded"
            )
        return super().__new__(cls, *args, **kwargs)

    def __init__(self, value: Any = None, *, cause: BaseException | None = None) -> None:
        if value is not None and cause is not None:
            raise InvalidSignalError(
                f"{type(self).__name__} carries either a value or a cause, not both",
                kind=SignalErrorKind.CONFLICTING_DETAIL,
            )
        if cause is not None and not isinstance(cause, BaseException):
            raise InvalidSignalError(
                f"{type(self).__name__} cause must be an exception, got {type(cause).__name__}",
                kind=SignalErrorKind.INVALID_CAUSE,
            )
        super().__init__()
        self._value = value
        self._cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def value(self) -> Any:
        """Payload carried by the signal, or ``None``."""
        return self._value

    @property
    def cause(self) -> BaseException | None:
        """Underlying exception carried by the signal, or ``None``."""
        return self._cause

    @property
    def detail(self) -> Any:
        """Whichever of cause or value is present."""
        return self._cause if self._cause is not None else self._value

    @property
    def has_detail(self) -> bool:
        return self._value is not None or self._cause is not None

    def _fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if self._value is not None:
            fields["value"] = self._value
        if self._cause is not None:
            fields["cause"] = self._cause
        return fields

    def _hash_key(self) -> tuple[Any, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signal):
            return NotImplemented
        return type(self) is type(other) and self._fields() == other._fields()

    def __hash__(self) -> int:
        return hash((type(self), self._hash_key()))

    def __reduce__(self) -> tuple[Any, ...]:
        return (_rebuild_signal, (type(self), dict(self.__dict__)))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {"signal": type(self).__name__}
        for key, value in self._fields().items():
            result[key] = repr(value) if key == "cause" else value
        return result

    def __repr__(self) -> str:
        args = ", ".join(f"{key}={value!r}" for key, value in self._fields().items())
        return f"{type(self).__name__}({args})"

    def __str__(self) -> str:
        return repr(self)


class Abort(Signal):
    """Stop now; the driver returns ``Aborted`` without retrying."""

    def __str__(self) -> str:
        if self._cause is not None:
            return f"aborted: {self._cause!r}"
        if self._value is not None:
            return f"aborted: {self._value!r}"
        return "aborted"


class Reset(Signal):
    """
    Retry after a delay.

    ``delays`` is the *remaining* schedule to use for this and subsequent
    retries. It replaces whatever the driver had left; it is never merged.
    ``None`` keeps the driver's current schedule, ``()`` leaves none, which
    makes the driver terminate with ``RetriesExceeded``.
    """

    def __init__(
        self,
        delays: Iterable[float | timedelta] | None = None,
        *,
        value: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(value, cause=cause)
        self._delays: Delays | None = None if delays is None else as_delays(delays)

    @property
    def delays(self) -> Delays | None:
        return self._delays

    def _fields(self) -> dict[str, Any]:
        return {"delays": self._delays, **super()._fields()}

    def _hash_key(self) -> tuple[Any, ...]:
        return (self._delays,)

    def __str__(self) -> str:
        if self._delays is None:
            return "reset (continue current schedule)"
        return f"reset with {len(self._delays)} delay(s) left"


class Retried(Signal):
    """
    Informational record of a retry that just happened.

    Emitted by the driver after each wait, carrying the last observed value or
    cause together with the new attempt number and the delay waited.
    """

    def __init__(
        self,
        value: Any = None,
        *,
        cause: BaseException | None = None,
        attempt: int = 0,
        delay: float | timedelta = 0.0,
    ) -> None:
        super().__init__(value, cause=cause)
        self._attempt = _as_count(attempt, "attempt")
        self._delay = _as_seconds(delay, "delay")

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def delay(self) -> float:
        return self._delay

    def _fields(self) -> dict[str, Any]:
        return {"attempt": self._attempt, "delay": self._delay, **super()._fields()}

    def _hash_key(self) -> tuple[Any, ...]:
        return (self._attempt, self._delay)

    def __str__(self) -> str:
        return f"retried (attempt {self._attempt}, after {self._delay}s)"


class RetriesExceeded(Signal):
    """
    The delay schedule (or retry cap) ran out before the work succeeded.

    ``retries`` is the exact number of retries performed; value/cause is the
    last one observed, for diagnostics.
    """

    def __init__(
        self,
        retries: int,
        value: Any = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(value, cause=cause)
        self._retries = _as_count(retries, "retries")

    @property
    def retries(self) -> int:
        return self._retries

    def _fields(self) -> dict[str, Any]:
        return {"retries": self._retries, **super()._fields()}

    def _hash_key(self) -> tuple[Any, ...]:
        return (self._retries,)

    def __str__(self) -> str:
        text = f"retries exceeded after {self._retries} retr{'y' if self._retries == 1 else 'ies'}"
        if self.has_detail:
            text += f": {self.detail!r}"
        return text


AnySignal = Abort | Reset | Retried | RetriesExceeded


def _rebuild_signal(cls: type[Signal], state: dict[str, Any]) -> Signal:
    # Bypasses __init__: the state was validated when the original was built.
    signal = cls.__new__(cls)
    signal.__dict__.update(state)
    if state.get("_cause") is not None:
        signal.__cause__ = state["_cause"]
    return signal


__all__ = [
    "Abort",
    "AnySignal",
    "Delays",
    "Reset",
    "RetriesExceeded",
    "Retried",
    "Signal",
    "MAX_SCHEDULE_LENGTH",
    "as_delays",
]
