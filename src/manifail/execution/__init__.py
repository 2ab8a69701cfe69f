"""manifail execution -- retry signals and the driver that interprets them.

MODULE MAP (recommended reading order)
──────────────────────────────────────
  1. signals.py        ─ Abort / Reset / Retried / RetriesExceeded
  2. outcome.py        ─ Success / Aborted / Failed terminal outcomes
  3. schedules.py      ─ backoff strategies that build delay schedules
  4. cancellation.py   ─ CancellationToken for pending waits
  5. driver.py         ─ RetryPolicy, RetryDriver, @with_retries
"""

from manifail.execution.cancellation import CancellationToken
from manifail.execution.driver import (
    DriverState,
    RetryDriver,
    RetryPolicy,
    RetryState,
    with_retries,
)
from manifail.execution.outcome import Aborted, Failed, Outcome, Success
from manifail.execution.schedules import (
    BackoffSchedule,
    ConstantBackoff,
    ExponentialBackoff,
    LinearBackoff,
    NoRetry,
)
from manifail.execution.signals import (
    Abort,
    Reset,
    RetriesExceeded,
    Retried,
    Signal,
    as_delays,
)

__all__ = [
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
    "BackoffSchedule",
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
