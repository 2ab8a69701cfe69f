"""
manifail - retry control-flow signals and the driver that interprets them.

A unit of work tells its retry driver what to do next by raising one of four
signals: ``Abort`` (stop now), ``Reset`` (retry after the next delay),
``RetriesExceeded`` (give up) -- and the driver reports each retry it performs
as a ``Retried`` record.

Usage:
    from manifail import Reset, RetryDriver, RetryPolicy, Success

    def fetch():
        try:
            return client.get("/quotes")
        except ConnectionError as e:
            raise Reset(cause=e)

    outcome = RetryDriver(RetryPolicy(delays=[0.1, 0.5, 2.0])).run(fetch)
"""

__version__ = "0.1.0"

from manifail.core.errors import (
    ConfigError,
    InvalidSignalError,
    ManifailError,
    RetryCancelledError,
    SignalErrorKind,
)
from manifail.core.logging import LogContext, configure_logging, get_logger
from manifail.core.settings import RetrySettings, get_settings
from manifail.execution import (
    Abort,
    Aborted,
    CancellationToken,
    ConstantBackoff,
    DriverState,
    ExponentialBackoff,
    Failed,
    LinearBackoff,
    NoRetry,
    Outcome,
    Reset,
    RetriesExceeded,
    Retried,
    RetryDriver,
    RetryPolicy,
    RetryState,
    Signal,
    Success,
    as_delays,
    with_retries,
)

__all__ = [
    "__version__",
    # errors
    "ConfigError",
    "InvalidSignalError",
    "ManifailError",
    "RetryCancelledError",
    "SignalErrorKind",
    # logging / settings
    "LogContext",
    "RetrySettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    # signals
    "Abort",
    "Reset",
    "Retried",
    "RetriesExceeded",
    "Signal",
    "as_delays",
    # outcomes
    "Aborted",
    "Failed",
    "Outcome",
    "Success",
    # schedules
    "ConstantBackoff",
    "ExponentialBackoff",
    "LinearBackoff",
    "NoRetry",
    # driver
    "CancellationToken",
    "DriverState",
    "RetryDriver",
    "RetryPolicy",
    "RetryState",
    "with_retries",
]
