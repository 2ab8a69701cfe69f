"""
Shared pytest fixtures and configuration for manifail tests.

This module provides:
- src/ on sys.path so tests run without an editable install
- Settings cache and MANIFAIL_* environment isolation
- structlog reset between tests so capture_logs() sees every event
- Small unit-of-work helpers used across the driver tests
"""

import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

# Ensure manifail package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from manifail.core.settings import clear_settings_cache
from manifail.execution.signals import Reset


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Drop MANIFAIL_* env vars and any cached settings around each test."""
    for key in list(os.environ):
        if key.startswith("MANIFAIL_"):
            monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults so configure_logging() in one test cannot leak."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Unit-of-work helpers
# =============================================================================


class ScriptedWork:
    """Callable that replays a script of outcomes, one per invocation.

    Each step is either an exception instance (raised), a Signal instance
    (raised), or any other value (returned). Calls beyond the script repeat
    the last step.
    """

    def __init__(self, *steps: Any) -> None:
        self.steps = list(steps)
        self.calls = 0

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        step = self.steps[min(self.calls, len(self.steps) - 1)]
        self.calls += 1
        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture
def scripted() -> Callable[..., ScriptedWork]:
    """Factory for ScriptedWork instances."""
    return ScriptedWork


@pytest.fixture
def always_reset() -> Callable[..., Any]:
    """Work that raises a fresh Reset() on every call and counts invocations."""

    def work() -> Any:
        work.calls += 1  # type: ignore[attr-defined]
        raise Reset(value=f"attempt-{work.calls}")  # type: ignore[attr-defined]

    work.calls = 0  # type: ignore[attr-defined]
    return work
