"""Tests for the asyncio side of the retry driver."""

import asyncio
import inspect
import time

import pytest

from manifail.core.errors import InvalidSignalError, RetryCancelledError
from manifail.execution.cancellation import CancellationToken
from manifail.execution.driver import RetryDriver, RetryPolicy, with_retries
from manifail.execution.outcome import Aborted, Failed, Success
from manifail.execution.signals import Abort, Reset, RetriesExceeded, Retried


def make_async_work(*steps):
    """Coroutine function replaying ``steps`` like conftest.ScriptedWork."""
    calls = []

    async def work():
        step = steps[min(len(calls), len(steps) - 1)]
        calls.append(step)
        await asyncio.sleep(0)
        if isinstance(step, BaseException):
            raise step
        return step

    work.calls = calls
    return work


class TestRunAsync:
    @pytest.mark.asyncio
    async def test_success_after_resets(self):
        work = make_async_work(Reset(), Reset(), 42)
        start = time.monotonic()
        outcome = await RetryDriver(RetryPolicy(delays=[0.01, 0.02])).run_async(work)

        assert outcome == Success(42, attempt=2)
        assert len(work.calls) == 3
        assert time.monotonic() - start >= 0.03

    @pytest.mark.asyncio
    async def test_abort(self):
        outcome = await RetryDriver(RetryPolicy(delays=[0.0])).run_async(make_async_work(Abort("stop")))
        assert isinstance(outcome, Aborted)
        assert outcome.value == "stop"

    @pytest.mark.asyncio
    async def test_exhaustion(self):
        work = make_async_work(Reset(value="busy"))
        outcome = await RetryDriver(RetryPolicy(delays=[0.005])).run_async(work)

        assert outcome == Failed(RetriesExceeded(1, "busy"), attempt=1)
        assert len(work.calls) == 2

    @pytest.mark.asyncio
    async def test_sync_callable_accepted(self):
        outcome = await RetryDriver().run_async(lambda x: x + 1, 1)
        assert outcome == Success(2, 0)

    @pytest.mark.asyncio
    async def test_returned_signal(self):
        async def work():
            return Abort("returned")

        outcome = await RetryDriver().run_async(work)
        assert outcome.value == "returned"

    @pytest.mark.asyncio
    async def test_retried_from_work_aborts(self):
        outcome = await RetryDriver(RetryPolicy(delays=[0.0])).run_async(make_async_work(Retried()))
        assert isinstance(outcome.cause, InvalidSignalError)

    @pytest.mark.asyncio
    async def test_unrelated_error_propagates(self):
        with pytest.raises(LookupError):
            await RetryDriver(RetryPolicy(delays=[0.0])).run_async(make_async_work(LookupError("x")))

    @pytest.mark.asyncio
    async def test_on_retry(self):
        seen = []
        driver = RetryDriver(RetryPolicy(delays=[0.0, 0.0]), on_retry=seen.append)
        await driver.run_async(make_async_work(Reset(), Reset(), "ok"))
        assert [record.attempt for record in seen] == [1, 2]


class TestAsyncCancellation:
    @pytest.mark.asyncio
    async def test_token_cancels_wait(self):
        token = CancellationToken()
        driver = RetryDriver(RetryPolicy(delays=[30.0]), cancel_token=token)
        asyncio.get_running_loop().call_later(0.05, token.cancel, "shutdown")

        start = time.monotonic()
        outcome = await driver.run_async(make_async_work(Reset()))

        assert time.monotonic() - start < 5.0
        assert isinstance(outcome, Aborted)
        assert isinstance(outcome.cause, RetryCancelledError)
        assert outcome.cause.reason == "shutdown"

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self):
        driver = RetryDriver(RetryPolicy(delays=[30.0]))
        task = asyncio.create_task(driver.run_async(make_async_work(Reset())))
        await asyncio.sleep(0.02)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_concurrent_runs_share_driver(self):
        driver = RetryDriver(RetryPolicy(delays=[0.01]))
        outcomes = await asyncio.gather(
            *(driver.run_async(make_async_work(Reset(), name)) for name in "abc")
        )
        assert outcomes == [Success(name, 1) for name in "abc"]


class TestAsyncDecorator:
    @pytest.mark.asyncio
    async def test_wraps_coroutine_function(self):
        attempts = []

        @with_retries(delays=[0.0, 0.0])
        async def fetch(symbol):
            attempts.append(symbol)
            if len(attempts) < 2:
                raise Reset(cause=ConnectionError("refused"))
            return f"{symbol}:ok"

        assert inspect.iscoroutinefunction(fetch)
        assert await fetch("AAPL") == "AAPL:ok"
        assert attempts == ["AAPL", "AAPL"]

    @pytest.mark.asyncio
    async def test_call_async_raises_terminal_signal(self):
        with pytest.raises(RetriesExceeded):
            await RetryDriver().call_async(make_async_work(Reset()))
