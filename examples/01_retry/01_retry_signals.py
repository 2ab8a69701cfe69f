#!/usr/bin/env python3
"""Retry Signals: Telling the Driver What to Do Next.

================================================================================
WHY SIGNALS?
================================================================================

Most retry helpers decide *for* you: catch these exception types, wait this
long, give up after N tries. The unit of work usually knows better. A 503
means "try again soon", a 429 with ``Retry-After: 30`` means "try again in
30s, once", a 401 means "stop, retrying is pointless".

manifail lets the work say so directly::

    raise Reset()                      # retry on the current schedule
    raise Reset([30.0])                # retry once more, in 30 seconds
    raise Abort(cause=exc)             # stop now
    raise RetriesExceeded(0, "quota")  # give up, report as exhausted

The driver interprets the signal and returns exactly one outcome:
``Success``, ``Aborted`` or ``Failed``.


================================================================================
ARCHITECTURE
================================================================================

::

    ┌──────────┐   run(work)   ┌─────────────┐   Reset    ┌────────────────┐
    │  Caller  │──────────────►│ RetryDriver │──────────►│ AWAITING_DELAY │
    └──────────┘               │             │◄──────────│  pop delays[0] │
         ▲                     └─────────────┘  Retried  └────────────────┘
         │  Success | Aborted | Failed  │
         └──────────────────────────────┘


================================================================================
EXAMPLE USAGE
================================================================================

Run this example:
    python examples/01_retry/01_retry_signals.py

See Also:
    02_async_cancellation - async work and cancelling a pending wait
"""
from manifail import (
    Abort,
    Aborted,
    ExponentialBackoff,
    Failed,
    Reset,
    RetryDriver,
    RetryPolicy,
    Success,
    configure_logging,
    with_retries,
)


def main():
    configure_logging(level="INFO", json_format=False)

    print("=" * 60)
    print("Retry Signal Examples")
    print("=" * 60)

    # === 1. Reset until success ===
    print("\n[1] Reset Until Success")

    calls = 0

    def flaky_fetch():
        nonlocal calls
        calls += 1
        if calls < 3:
            raise Reset(value=f"503 on call {calls}")
        return {"symbol": "AAPL", "price": 150.0}

    driver = RetryDriver(RetryPolicy(delays=[0.01, 0.02, 0.04]))
    outcome = driver.run(flaky_fetch)
    print(f"  Outcome: {outcome}")

    # === 2. Renegotiating the schedule ===
    print("\n[2] Renegotiating the Schedule")

    def rate_limited():
        raise Reset([0.05], value="429 Retry-After")

    outcome = RetryDriver(RetryPolicy(delays=[0.01] * 5)).run(rate_limited)
    print(f"  Outcome: {outcome}")
    print("  Only one retry: the Reset schedule replaced the default")

    # === 3. Abort short-circuits ===
    print("\n[3] Abort Short-Circuits")

    def unauthorized():
        raise Abort(cause=PermissionError("401 Unauthorized"))

    outcome = RetryDriver(RetryPolicy(delays=[0.01] * 3)).run(unauthorized)
    match outcome:
        case Success(value):
            print(f"  Got {value}")
        case Aborted() as aborted:
            print(f"  Aborted: {aborted.cause!r}")
        case Failed() as failed:
            print(f"  Gave up after {failed.retries} retries")

    # === 4. Decorator with a backoff schedule ===
    print("\n[4] with_retries Decorator")

    attempts = []

    @with_retries(delays=ExponentialBackoff(max_retries=3, base_delay=0.01, jitter=False))
    def connect(host: str) -> str:
        attempts.append(host)
        if len(attempts) < 2:
            raise Reset(cause=ConnectionError("connection refused"))
        return f"connected to {host}"

    print(f"  Result: {connect('db-1')}")
    print(f"  Attempts: {len(attempts)}")

    print("\n" + "=" * 60)
    print("[OK] Retry Signals Complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
