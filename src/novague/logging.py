"""Structured logging configuration for NoVague.

This module configures structlog with support for:
- JSON and console output formats
- File rotation based on size
- Correlation IDs for request tracing
- Pipeline and stage context binding

The logging system integrates structlog with Python's stdlib logging
for handlers (file rotation), while using structlog exclusively for
actual log emission.

Example usage:
    >>> from novague.config import LoggingConfig
    >>> from novague.logging import setup_logging, get_logger, bind_pipeline_context
    >>>
    >>> config = LoggingConfig(level="INFO", format="json", file=Path("novague.log"))
    >>> setup_logging(config)
    >>>
    >>> logger = get_logger(__name__)
    >>> bind_pipeline_context(pipeline_id="P-123", stage=2)
    >>> logger.info("stage_started", source="mock")
"""

from __future__ import annotations

import contextvars
import logging
import logging.handlers
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from novague.config import LoggingConfig

# Chatty at INFO; only shown when the root level is DEBUG
LIBRARY_LOGGERS = ("httpx", "httpcore")

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add correlation_id to log event if set in context.

    Args:
        logger: Logger instance (unused, required by structlog protocol)
        method_name: Log method name (unused, required by structlog protocol)
        event_dict: Current event dictionary to augment

    Returns:
        Event dictionary with correlation_id added if available
    """
    correlation_id = _correlation_id.get()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def set_correlation_id(correlation_id: str | None) -> None:
    """Set correlation ID for current context.

    Args:
        correlation_id: Correlation ID string or None to clear
    """
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def bind_pipeline_context(pipeline_id: str, stage: int | None = None) -> None:
    """Bind pipeline (and optionally stage) context to all subsequent logs.

    Args:
        pipeline_id: Pipeline session identifier to bind
        stage: Stage number currently being generated
    """
    if stage is None:
        structlog.contextvars.bind_contextvars(pipeline_id=pipeline_id)
    else:
        structlog.contextvars.bind_contextvars(pipeline_id=pipeline_id, stage=stage)


def clear_pipeline_context() -> None:
    """Remove pipeline context bound by bind_pipeline_context."""
    structlog.contextvars.unbind_contextvars("pipeline_id", "stage")


@contextmanager
def pipeline_context(pipeline_id: str, stage: int | None = None) -> Iterator[None]:
    """Bind pipeline context for the duration of a block.

    Unlike clear_pipeline_context, leaving the block restores whatever was
    bound before it, so a request-level ``pipeline_id`` outlives the stage
    generation nested inside the request.

    Example:
        >>> with pipeline_context("P-123", stage=4):
        ...     logger.info("stage_started")
    """
    values: dict[str, Any] = {"pipeline_id": pipeline_id}
    if stage is not None:
        values["stage"] = stage
    with structlog.contextvars.bound_contextvars(**values):
        yield


def setup_logging(config: LoggingConfig) -> None:
    """Configure structlog with the given configuration.

    Sets up JSON or console rendering, optional size-based file rotation,
    timestamp/level/logger-name processors and the correlation ID processor.

    Args:
        config: Logging configuration from NovagueConfig

    Example:
        >>> # Console logging for development
        >>> setup_logging(LoggingConfig(level="DEBUG", format="console"))
    """
    log_level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler: logging.Handler
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=config.file,
            maxBytes=config.rotation_size_mb * 1024 * 1024,
            backupCount=config.retention_count,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    # Backend HTTP traffic would otherwise log every request at INFO
    library_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    if config.format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            # pipeline_id / stage from bind_pipeline_context or pipeline_context
            structlog.contextvars.merge_contextvars,
            add_correlation_id,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)
