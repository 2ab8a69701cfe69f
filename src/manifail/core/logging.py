"""
Structured logging for manifail.

The retry driver reports every decision it takes as a structured event:
``retry_reset``, ``retry_scheduled``, ``retried``, ``retry_succeeded``,
``retry_aborted``, ``retries_exceeded``, ``retry_cancelled`` and
``invalid_signal``. This module configures structlog for a host application
and hands out loggers.

Events are written to stderr by default so that command output on stdout
(``manifail schedule ... --json``) stays machine-readable.

Examples:
    >>> from manifail.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("retry_reset", remaining=3)

    Scoped context for everything logged inside a job:

    >>> with LogContext(job="nightly-sync"):
    ...     driver.run(sync_orders)
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


def _service_metadata(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename timestamp/level to their ECS (Elasticsearch) field names."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "manifail",
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog for retry events.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON lines, False for the console renderer,
            None to pick JSON unless ``stream`` is a TTY
        service: Value of the ``service.name`` field
        stream: Destination, ``sys.stderr`` when omitted
    """
    stream = stream or sys.stderr
    numeric_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    if json_format is None:
        json_format = not stream.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _service_metadata(service),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            _ecs_field_names,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger, bound to ``logger=name`` when a name is given.

    Args:
        name: Logger name (usually __name__)
    """
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger=name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(job="nightly-sync", run_id="abc123")
        logger.info("retried")  # Includes job and run_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(job="nightly-sync", run_id="abc123"):
            driver.run(sync_orders)
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    async def __aexit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
