"""manifail core -- errors, structured logging and settings.

Architecture::

    errors.py      Structured error hierarchy (ManifailError, InvalidSignalError)
    logging.py     structlog configuration + scoped LogContext
    settings.py    RetrySettings (pydantic-settings, MANIFAIL_ prefix)
"""

from manifail.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidSignalError,
    ManifailError,
    RetryCancelledError,
    SignalErrorKind,
)
from manifail.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from manifail.core.settings import RetrySettings, clear_settings_cache, get_settings

__all__ = [
    # errors
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidSignalError",
    "ManifailError",
    "RetryCancelledError",
    "SignalErrorKind",
    # logging
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # settings
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
