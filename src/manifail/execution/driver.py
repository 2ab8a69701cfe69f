"""Retry driver: runs a unit of work and interprets the signals it raises.

State machine (one per run, never shared)::

    RUNNING ── returns value ─────────────────────────────▶ TERMINATED(Success)
       │  ─── Abort ──────────────────────────────────────▶ TERMINATED(Aborted)
       │  ─── RetriesExceeded ────────────────────────────▶ TERMINATED(Failed)
       │  ─── Reset, schedule empty or cap reached ───────▶ TERMINATED(Failed)
       │  ─── Reset, schedule left: pop head delay
       ▼
    AWAITING_DELAY ── cancelled ──────────────────────────▶ TERMINATED(Aborted)
       │
       └─ delay elapsed: attempt += 1, emit Retried ──▶ RUNNING

Any other exception raised by the work propagates unchanged.

Example:
    >>> driver = RetryDriver(RetryPolicy(delays=[0.01, 0.02]))
    >>> outcome = driver.run(fetch_quotes, "AAPL")
    >>> match outcome:
    ...     case Success(value, attempt):
    ...         print(f"got {value} after {attempt} retries")
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, TypeVar, assert_never

from manifail.core.errors import (
    ConfigError,
    InvalidSignalError,
    RetryCancelledError,
    SignalErrorKind,
)
from manifail.core.logging import get_logger
from manifail.core.settings import RetrySettings, get_settings
from manifail.execution.cancellation import CancellationToken
from manifail.execution.outcome import Aborted, Failed, Outcome, Success
from manifail.execution.signals import (
    Abort,
    AnySignal,
    Delays,
    Reset,
    RetriesExceeded,
    Retried,
    Signal,
    as_delays,
)

logger = get_logger(__name__)

T = TypeVar("T")
OnRetry = Callable[[Retried], None]


class DriverState(str, Enum):
    RUNNING = "running"
    AWAITING_DELAY = "awaiting_delay"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class RetryPolicy:
    """Caller-side configuration of a driver.

    Attributes:
        delays: Default schedule, used until the work raises a Reset that
            carries its own
        max_retries: Hard cap on retries even if the schedule has more entries
    """

    delays: Delays = ()
    max_retries: int | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "delays", as_delays(self.delays))
        except InvalidSignalError as exc:
            raise ConfigError(f"invalid default delay schedule: {exc.message}", cause=exc) from exc

        cap = self.max_retries
        if cap is not None and (isinstance(cap, bool) or not isinstance(cap, int) or cap < 0):
            raise ConfigError(f"max_retries must be a non-negative int or None, got {cap!r}")

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None) -> RetryPolicy:
        settings = settings or get_settings()
        return cls(delays=settings.default_delays, max_retries=settings.max_retries)


@dataclass
class RetryState:
    """Per-run driver context: attempt counter, schedule and last observation."""

    remaining_delays: Delays
    attempt: int = 0
    last_value: Any = None
    last_cause: BaseException | None = None
    pending_delay: float | None = None
    total_delay: float = 0.0
    state: DriverState = DriverState.RUNNING
    started_at: float = field(default_factory=time.monotonic)

    def observe(self, signal: Signal) -> None:
        """Remember the signal's value or cause; absent details never clear it."""
        if signal.has_detail:
            self.last_value, self.last_cause = signal.value, signal.cause

    @property
    def elapsed(self) -> float:
        """Seconds since the run started."""
        return time.monotonic() - self.started_at


def _describe(work: Callable[..., Any]) -> str:
    return getattr(work, "__qualname__", None) or repr(work)


class RetryDriver:
    """Executes a unit of work until it succeeds, aborts or runs out of retries.

    A driver holds only configuration; every ``run`` builds a fresh
    :class:`RetryState`, so one driver may serve many concurrent runs.

    Attributes:
        policy: Default schedule and retry cap
        on_retry: Called with a ``Retried`` record after each wait
        cancel_token: Ends a pending wait early; the run returns ``Aborted``
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        on_retry: OnRetry | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self.on_retry = on_retry
        self.cancel_token = cancel_token

    @classmethod
    def from_settings(
        cls,
        settings: RetrySettings | None = None,
        **kwargs: Any,
    ) -> RetryDriver:
        """Build a driver whose policy comes from ``MANIFAIL_*`` settings."""
        return cls(RetryPolicy.from_settings(settings), **kwargs)

    def new_state(self) -> RetryState:
        return RetryState(remaining_delays=self.policy.delays)

    # ── Execution ────────────────────────────────────────────────────────

    def run(self, work: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
        """Execute ``work(*args, **kwargs)`` under the retry protocol.

        Returns:
            Success, Aborted or Failed

        Raises:
            Whatever non-signal exception the work raises, unchanged.
        """
        state = self.new_state()
        token = self.cancel_token or CancellationToken()
        log = logger.bind(operation=_describe(work))

        while True:
            state.state = DriverState.RUNNING
            try:
                result = work(*args, **kwargs)
            except Signal as signal:
                outcome = self._interpret(state, signal, log)
            except InvalidSignalError as exc:
                outcome = self._invalid(state, exc, log)
            else:
                if not isinstance(result, Signal):
                    return self._succeed(state, result, log)
                outcome = self._interpret(state, result, log)

            if outcome is not None:
                return outcome

            if token.wait(state.pending_delay or 0.0):
                return self._cancelled(state, token, log)
            self._retried(state, log)

    async def run_async(
        self,
        work: Callable[..., Awaitable[T] | T],
        *args: Any,
        **kwargs: Any,
    ) -> Outcome[T]:
        """Async variant of :meth:`run`; ``work`` may return an awaitable."""
        state = self.new_state()
        token = self.cancel_token or CancellationToken()
        log = logger.bind(operation=_describe(work))

        while True:
            state.state = DriverState.RUNNING
            try:
                result = work(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
            except Signal as signal:
                outcome = self._interpret(state, signal, log)
            except InvalidSignalError as exc:
                outcome = self._invalid(state, exc, log)
            else:
                if not isinstance(result, Signal):
                    return self._succeed(state, result, log)
                outcome = self._interpret(state, result, log)

            if outcome is not None:
                return outcome

            if await token.wait_async(state.pending_delay or 0.0):
                return self._cancelled(state, token, log)
            self._retried(state, log)

    def call(self, work: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run and unwrap: return the value or raise the terminal signal."""
        return self.run(work, *args, **kwargs).unwrap()

    async def call_async(self, work: Callable[..., Awaitable[T] | T], *args: Any, **kwargs: Any) -> T:
        return (await self.run_async(work, *args, **kwargs)).unwrap()

    # ── Transitions ──────────────────────────────────────────────────────

    def _interpret(self, state: RetryState, signal: AnySignal, log: Any) -> Outcome[Any] | None:
        """Apply one signal. Returns a terminal outcome, or None to wait and retry."""
        match signal:
            case Abort():
                state.observe(signal)
                return self._abort(state, signal, log)
            case Reset():
                state.observe(signal)
                return self._reset(state, signal, log)
            case RetriesExceeded():
                state.observe(signal)
                return self._fail(state, log)
            case Retried():
                error = InvalidSignalError(
                    "Retried is emitted by the retry driver and cannot be raised by work",
                    kind=SignalErrorKind.UNEXPECTED_SIGNAL,
                    cause=signal,
                )
                return self._invalid(state, error, log)
            case _:
                assert_never(signal)

    def _reset(self, state: RetryState, signal: Reset, log: Any) -> Failed | None:
        if signal.delays is not None:
            state.remaining_delays = signal.delays
            log.debug("retry_reset", attempt=state.attempt, remaining=len(signal.delays))

        cap = self.policy.max_retries
        if not state.remaining_delays or (cap is not None and state.attempt >= cap):
            return self._fail(state, log)

        state.pending_delay = state.remaining_delays[0]
        state.remaining_delays = state.remaining_delays[1:]
        state.state = DriverState.AWAITING_DELAY
        log.debug(
            "retry_scheduled",
            attempt=state.attempt,
            delay=state.pending_delay,
            remaining=len(state.remaining_delays),
        )
        return None

    def _retried(self, state: RetryState, log: Any) -> None:
        delay = state.pending_delay or 0.0
        state.attempt += 1
        state.total_delay += delay
        state.pending_delay = None
        state.state = DriverState.RUNNING

        record = Retried(
            state.last_value,
            cause=state.last_cause,
            attempt=state.attempt,
            delay=delay,
        )
        log.info(
            "retried",
            attempt=state.attempt,
            delay=delay,
            remaining=len(state.remaining_delays),
        )
        if self.on_retry is not None:
            self.on_retry(record)

    def _succeed(self, state: RetryState, result: T, log: Any) -> Success[T]:
        state.state = DriverState.TERMINATED
        log.debug("retry_succeeded", attempt=state.attempt, elapsed=round(state.elapsed, 6))
        return Success(result, state.attempt)

    def _abort(self, state: RetryState, signal: Abort, log: Any) -> Aborted:
        state.state = DriverState.TERMINATED
        log.warning("retry_aborted", attempt=state.attempt, **signal.to_dict())
        return Aborted(signal, state.attempt)

    def _fail(self, state: RetryState, log: Any) -> Failed:
        """Fail with the retries actually performed and the last observed detail."""
        signal = RetriesExceeded(state.attempt, state.last_value, cause=state.last_cause)
        state.state = DriverState.TERMINATED
        log.warning(
            "retries_exceeded",
            retries=signal.retries,
            total_delay=state.total_delay,
            elapsed=round(state.elapsed, 6),
        )
        return Failed(signal, state.attempt)

    def _invalid(self, state: RetryState, error: InvalidSignalError, log: Any) -> Aborted:
        state.state = DriverState.TERMINATED
        log.error("invalid_signal", attempt=state.attempt, kind=error.kind.value, error=error.message)
        return Aborted(Abort(cause=error), state.attempt)

    def _cancelled(self, state: RetryState, token: CancellationToken, log: Any) -> Aborted:
        error = RetryCancelledError(
            attempt=state.attempt,
            delay=state.pending_delay,
            reason=token.reason,
        )
        state.state = DriverState.TERMINATED
        log.info("retry_cancelled", attempt=state.attempt, delay=state.pending_delay, reason=token.reason)
        return Aborted(Abort(cause=error), state.attempt)


def with_retries(
    policy: RetryPolicy | None = None,
    *,
    delays: Iterable[float | timedelta] | None = None,
    max_retries: int | None = None,
    on_retry: OnRetry | None = None,
    cancel_token: CancellationToken | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator factory that runs a function under a :class:`RetryDriver`.

    The wrapped function returns its value on success and raises the
    terminal ``Abort`` or ``RetriesExceeded`` signal otherwise.

    Example:
        >>> @with_retries(delays=ExponentialBackoff(max_retries=3, jitter=False))
        ... def fetch_quotes(symbol):
        ...     try:
        ...         return client.quotes(symbol)
        ...     except ConnectionError as e:
        ...         raise Reset(cause=e)
    """
    if policy is None:
        policy = RetryPolicy(delays=() if delays is None else delays, max_retries=max_retries)
    elif delays is not None or max_retries is not None:
        raise ConfigError("pass either a RetryPolicy or delays/max_retries, not both")

    driver = RetryDriver(policy, on_retry=on_retry, cancel_token=cancel_token)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> T:
                return await driver.call_async(func, *args, **kwargs)
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> T:
            return driver.call(func, *args, **kwargs)
        return sync_wrapper

    return decorator


__all__ = [
    "DriverState",
    "OnRetry",
    "RetryDriver",
    "RetryPolicy",
    "RetryState",
    "with_retries",
]
