"""Tests for Success / Aborted / Failed outcomes."""

import dataclasses

import pytest

from manifail.execution.outcome import Aborted, Failed, Success
from manifail.execution.signals import Abort, RetriesExceeded


class TestSuccess:
    def test_fields(self):
        outcome = Success(42, attempt=2)
        assert outcome.value == 42
        assert outcome.attempt == 2
        assert outcome.is_success() is True

    def test_unwrap(self):
        assert Success("ok").unwrap() == "ok"
        assert Success("ok").unwrap_or("default") == "ok"

    def test_none_is_a_valid_value(self):
        assert Success(None).unwrap() is None

    def test_to_dict(self):
        assert Success([1], attempt=1).to_dict() == {"outcome": "success", "attempt": 1, "value": [1]}

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Success(1).value = 2  # type: ignore[misc]

    def test_equality(self):
        assert Success(1, 0) == Success(1, 0)
        assert Success(1, 0) != Success(1, 1)


class TestAborted:
    def test_exposes_signal_detail(self):
        outcome = Aborted(Abort("stop"), attempt=1)
        assert outcome.value == "stop"
        assert outcome.cause is None
        assert outcome.is_success() is False

    def test_unwrap_raises_signal(self):
        signal = Abort("stop")
        with pytest.raises(Abort) as exc_info:
            Aborted(signal).unwrap()
        assert exc_info.value is signal

    def test_unwrap_or(self):
        assert Aborted(Abort()).unwrap_or("fallback") == "fallback"

    def test_to_dict(self):
        assert Aborted(Abort("stop"), 2).to_dict() == {
            "outcome": "aborted",
            "attempt": 2,
            "signal": "Abort",
            "value": "stop",
        }


class TestFailed:
    def test_exposes_signal_detail(self):
        error = TimeoutError("slow")
        outcome = Failed(RetriesExceeded(3, cause=error), attempt=3)
        assert outcome.retries == 3
        assert outcome.cause is error
        assert outcome.value is None

    def test_unwrap_raises_signal(self):
        with pytest.raises(RetriesExceeded) as exc_info:
            Failed(RetriesExceeded(1, "last")).unwrap()
        assert exc_info.value.retries == 1
        assert exc_info.value.value == "last"

    def test_to_dict(self):
        assert Failed(RetriesExceeded(0)).to_dict() == {
            "outcome": "failed",
            "attempt": 0,
            "signal": "RetriesExceeded",
            "retries": 0,
        }


class TestPatternMatching:
    @pytest.mark.parametrize(
        "outcome, expected",
        [
            (Success("v", 1), "success:v:1"),
            (Aborted(Abort("a")), "aborted:a"),
            (Failed(RetriesExceeded(2)), "failed:2"),
        ],
    )
    def test_match(self, outcome, expected):
        match outcome:
            case Success(value, attempt):
                label = f"success:{value}:{attempt}"
            case Aborted() as aborted:
                label = f"aborted:{aborted.value}"
            case Failed() as failed:
                label = f"failed:{failed.retries}"
        assert label == expected
