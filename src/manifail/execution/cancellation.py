"""Cancellation tokens for retry waits.

A driver blocked between attempts waits on its token instead of sleeping, so
``token.cancel()`` from any thread (or from the event loop) ends the wait at
once. The driver then terminates with ``Aborted`` carrying a
``RetryCancelledError``. Work that is already running is not preempted; it
can poll ``token.cancelled`` and raise ``Abort`` itself.

Example:
    >>> token = CancellationToken()
    >>> driver = RetryDriver(RetryPolicy(delays=[30.0]), cancel_token=token)
    >>> threading.Timer(1.0, token.cancel, args=("shutdown",)).start()
    >>> driver.run(poll_upstream)      # returns Aborted after ~1s, not 30s
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable


class CancellationToken:
    """Thread-safe, one-shot cancellation flag with sync and async waits."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the token. Only the first call's reason is kept."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def wait(self, timeout: float) -> bool:
        """Block for up to ``timeout`` seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)

    async def wait_async(self, timeout: float) -> bool:
        """Await up to ``timeout`` seconds; True if cancelled meanwhile."""
        if self._event.is_set():
            return True

        loop = asyncio.get_running_loop()
        woken: asyncio.Future[None] = loop.create_future()

        def _set() -> None:
            if not woken.done():
                woken.set_result(None)

        def _wake() -> None:
            loop.call_soon_threadsafe(_set)

        self._add_callback(_wake)
        try:
            done, _ = await asyncio.wait({woken}, timeout=timeout)
            return woken in done
        finally:
            self._remove_callback(_wake)
            if not woken.done():
                woken.cancel()

    def _add_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def _remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def __repr__(self) -> str:
        state = f"cancelled, reason={self._reason!r}" if self.cancelled else "active"
        return f"CancellationToken({state})"


__all__ = ["CancellationToken"]
