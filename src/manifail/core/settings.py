"""Environment-driven settings for the retry driver.

``RetrySettings`` holds the two knobs a host can set without touching code:
the default delay schedule used when work raises ``Reset`` without one, and a
hard cap on retries that applies even when the schedule is longer.

Environment variables (prefix ``MANIFAIL_``, ``.env`` supported):

    MANIFAIL_DEFAULT_DELAYS   JSON list of seconds, e.g. ``[0.1, 0.5, 2]``
    MANIFAIL_MAX_RETRIES      non-negative integer (unset = no cap)
    MANIFAIL_LOG_LEVEL        structlog level (default ``INFO``)
    MANIFAIL_LOG_JSON         ``true``/``false`` (unset = auto-detect TTY)

Examples:
    >>> from manifail.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.default_delays
    ()
"""

from __future__ import annotations

from pydantic import Field, NonNegativeFloat, NonNegativeInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Settings consumed by :class:`manifail.execution.driver.RetryPolicy`.

    Fields
    ──────
    default_delays : Delay schedule (seconds) used until work supplies its own
    max_retries    : Hard cap on retries regardless of schedule length
    log_level      : Structlog log level
    log_json       : Force JSON (True) or console (False) log rendering
    """

    model_config = SettingsConfigDict(
        env_prefix="MANIFAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Retry policy ─────────────────────────────────────────────
    default_delays: tuple[NonNegativeFloat, ...] = Field(
        default=(),
        description="Delay schedule in seconds used when Reset carries none",
    )
    max_retries: NonNegativeInt | None = Field(
        default=None,
        description="Hard cap on retries, even if the schedule has more entries",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None


_settings_cache: dict[str, RetrySettings] = {}


def get_settings(*, _force_reload: bool = False) -> RetrySettings:
    """Load, validate, and cache a :class:`RetrySettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = RetrySettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings so the next ``get_settings()`` re-reads the env."""
    _settings_cache.clear()


__all__ = ["RetrySettings", "get_settings", "clear_settings_cache"]
