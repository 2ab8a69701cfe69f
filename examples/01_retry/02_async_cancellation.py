#!/usr/bin/env python3
"""Async Retries and Cancellation: Ending a Wait Early.

A driver waiting between attempts is parked on its ``CancellationToken``.
Cancelling the token (from the event loop, a signal handler or another
thread) ends the wait immediately and the run returns ``Aborted`` with a
``RetryCancelledError`` cause, instead of sleeping out a long delay.

Run this example:
    python examples/01_retry/02_async_cancellation.py
"""
import asyncio
import time

from manifail import CancellationToken, Reset, RetryDriver, RetryPolicy, configure_logging


async def main():
    configure_logging(level="INFO", json_format=False)

    print("=" * 60)
    print("Async Retry + Cancellation")
    print("=" * 60)

    # === 1. Async work ===
    print("\n[1] Async Work")

    calls = 0

    async def poll_upstream():
        nonlocal calls
        calls += 1
        await asyncio.sleep(0)
        if calls < 2:
            raise Reset(value="not ready")
        return "ready"

    outcome = await RetryDriver(RetryPolicy(delays=[0.01])).run_async(poll_upstream)
    print(f"  Outcome: {outcome}")

    # === 2. Cancelling a long wait ===
    print("\n[2] Cancelling a Long Wait")

    async def never_ready():
        raise Reset(value="still not ready")

    token = CancellationToken()
    driver = RetryDriver(RetryPolicy(delays=[30.0]), cancel_token=token)
    asyncio.get_running_loop().call_later(0.1, token.cancel, "shutdown requested")

    start = time.monotonic()
    outcome = await driver.run_async(never_ready)
    print(f"  Outcome: {outcome}")
    print(f"  Returned after {time.monotonic() - start:.2f}s instead of 30s")

    print("\n" + "=" * 60)
    print("[OK] Async Cancellation Complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
