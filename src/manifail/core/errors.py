"""
Structured error types for manifail.

The retry signals (``Abort``, ``Reset``, ``Retried``, ``RetriesExceeded``) are
control flow, not failures, and live in :mod:`manifail.execution.signals`.
This module holds the *real* errors of the library: malformed signals,
cancelled waits and bad configuration.

Every ManifailError carries:
- **Category:** What kind of error (signal, cancellation, config, ...)
- **Retryable:** Whether the retry driver may retry after it (never, so far)
- **Context:** Attempt, delay and free-form metadata for logging
- **Cause:** Chained underlying exception for root cause analysis

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                     ManifailError                         │
        │         (category, retryable, context, cause)             │
        ├──────────────────────────────────────────────────────────┤
        │  InvalidSignalError     RetryCancelledError   ConfigError │
        │  (SIGNAL, ValueError)   (CANCELLED)           (CONFIG)    │
        │    kind: SignalErrorKind                                  │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidSignalError(
    ...     "delay must be non-negative, got -1",
    ...     kind=SignalErrorKind.INVALID_DELAY,
    ... )
    >>> error.kind.value
    'InvalidDelay'
    >>> error.to_dict()["category"]
    'SIGNAL'

Guardrails:
    ❌ DON'T: Raise ManifailError from a unit of work to ask for a retry
    ✅ DO: Raise ``Reset`` (or ``Abort``) from manifail.execution.signals

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        SIGNAL: Malformed or misplaced retry signal
        CANCELLED: A retry wait was cancelled from outside
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    SIGNAL = "SIGNAL"             # Negative delay, bad retry count, ...
    CANCELLED = "CANCELLED"       # Cancellation token fired during a wait
    CONFIG = "CONFIG"             # Invalid settings / policy
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"           # Uncategorized errors


class SignalErrorKind(str, Enum):
    """Reason a signal could not be constructed or interpreted."""

    INVALID_DELAY = "InvalidDelay"
    INVALID_RETRY_COUNT = "InvalidRetryCount"
    CONFLICTING_DETAIL = "ConflictingDetail"
    INVALID_CAUSE = "InvalidCause"
    UNEXPECTED_SIGNAL = "UnexpectedSignal"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Only non-None fields are serialized by ``to_dict()``; anything that does
    not have a dedicated field goes into ``metadata``.

    Examples:
        >>> ctx = ErrorContext(operation="fetch_quotes", attempt=2)
        >>> ctx.to_dict()
        {'operation': 'fetch_quotes', 'attempt': 2}

    Attributes:
        operation: Qualified name of the unit of work
        attempt: Retry attempt ordinal when the error occurred
        delay: Delay (seconds) that was being waited, if any
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    attempt: int | None = None
    delay: float | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "attempt", "delay"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ManifailError(Exception):
    """
    Base exception for all manifail errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    rarely have to pass them explicitly.

    Examples:
        >>> error = ManifailError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        Adding context fluently:

        >>> error = ManifailError("Wait failed").with_context(attempt=3, host="db-1")
        >>> error.context.attempt
        3
        >>> error.context.metadata["host"]
        'db-1'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        # Chain the cause if provided
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ManifailError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("bad policy").with_context(operation="sync_orders")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SIGNAL ERRORS
# =============================================================================


class InvalidSignalError(ManifailError, ValueError):
    """
    A retry signal was malformed or raised where it does not belong.

    Raised at construction time for a negative delay, a negative retry count
    or a signal given both a value and a cause. The retry driver also uses it
    as the cause of an ``Aborted`` outcome when work raises a signal that only
    the driver may emit. It is fatal: the driver never retries after it.
    """

    default_category = ErrorCategory.SIGNAL
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        kind: SignalErrorKind,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.kind = kind

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["kind"] = self.kind.value
        return result


class RetryCancelledError(ManifailError):
    """The retry driver was cancelled while waiting before the next attempt."""

    default_category = ErrorCategory.CANCELLED
    default_retryable = False

    def __init__(
        self,
        message: str = "Retry cancelled while awaiting delay",
        *,
        attempt: int = 0,
        delay: float | None = None,
        reason: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.attempt = attempt
        self.delay = delay
        self.reason = reason
        self.context.attempt = attempt
        self.context.delay = delay
        if reason is not None:
            self.context.metadata["reason"] = reason


class ConfigError(ManifailError):
    """Invalid retry policy or settings."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


__all__ = [
    "ErrorCategory",
    "SignalErrorKind",
    "ErrorContext",
    "ManifailError",
    "InvalidSignalError",
    "RetryCancelledError",
    "ConfigError",
]
