"""Tests for CancellationToken."""

import asyncio
import threading
import time

import pytest

from manifail.execution.cancellation import CancellationToken


class TestCancellationToken:
    def test_initial_state(self):
        token = CancellationToken()
        assert token.cancelled is False
        assert token.reason is None
        assert "active" in repr(token)

    def test_cancel(self):
        token = CancellationToken()
        token.cancel("shutdown")
        assert token.cancelled is True
        assert token.reason == "shutdown"
        assert "shutdown" in repr(token)

    def test_first_reason_wins(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_wait_times_out(self):
        token = CancellationToken()
        start = time.monotonic()
        assert token.wait(0.02) is False
        assert time.monotonic() - start >= 0.015

    def test_wait_returns_immediately_when_cancelled(self):
        token = CancellationToken()
        token.cancel()
        start = time.monotonic()
        assert token.wait(5.0) is True
        assert time.monotonic() - start < 1.0

    def test_cancel_from_other_thread_wakes_wait(self):
        token = CancellationToken()
        timer = threading.Timer(0.02, token.cancel, args=("timer",))
        timer.start()
        start = time.monotonic()
        try:
            assert token.wait(5.0) is True
        finally:
            timer.cancel()
        assert time.monotonic() - start < 2.0
        assert token.reason == "timer"


class TestCancellationTokenAsync:
    @pytest.mark.asyncio
    async def test_wait_async_times_out(self):
        token = CancellationToken()
        assert await token.wait_async(0.01) is False

    @pytest.mark.asyncio
    async def test_wait_async_already_cancelled(self):
        token = CancellationToken()
        token.cancel()
        assert await token.wait_async(5.0) is True

    @pytest.mark.asyncio
    async def test_cancel_from_loop_wakes_wait(self):
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.02, token.cancel, "loop")
        start = time.monotonic()
        assert await token.wait_async(5.0) is True
        assert time.monotonic() - start < 2.0

    @pytest.mark.asyncio
    async def test_cancel_from_thread_wakes_wait(self):
        token = CancellationToken()
        timer = threading.Timer(0.02, token.cancel)
        timer.start()
        try:
            assert await token.wait_async(5.0) is True
        finally:
            timer.cancel()

    @pytest.mark.asyncio
    async def test_callbacks_removed_after_wait(self):
        token = CancellationToken()
        await token.wait_async(0.001)
        assert token._callbacks == []
