"""
Structured logging configuration for the HTTP request worker.

Uses structlog for structured, context-aware logging with:
- JSON output for production
- Pretty console output for development
- Message ID and retry count propagation from the current delivery
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Generator

import structlog
from structlog.types import Processor

from .config import get_config

# Context variables for delivery-scoped data
_message_id: ContextVar[str | None] = ContextVar('message_id', default=None)
_retry_count: ContextVar[int | None] = ContextVar('retry_count', default=None)


def get_message_id() -> str | None:
    """Get the current message ID from context."""
    return _message_id.get()


def get_retry_count() -> int | None:
    """Get the current retry count from context."""
    return _retry_count.get()


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor that adds context variables to log entries."""
    message_id = get_message_id()
    retry_count = get_retry_count()

    if message_id:
        event_dict.setdefault('message_id', message_id)
    if retry_count is not None:
        event_dict.setdefault('retry_count', retry_count)

    return event_dict


def configure_logging(
    json_output: bool | None = None,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON logs (for production).
                    If False, output pretty console logs (for development).
                    Defaults to config.LOG_JSON.
        log_level: Override log level (defaults to config.LOG_LEVEL)
    """
    config = get_config()
    if json_output is None:
        json_output = config.LOG_JSON
    level = log_level or config.LOG_LEVEL
    level_num = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stdout,
        level=level_num,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_info,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


@contextmanager
def logging_context(
    message_id: str | None = None,
    retry_count: int | None = None,
) -> Generator[None, None, None]:
    """
    Context manager for setting logging context variables.

    Usage:
        with logging_context(message_id="5d41402abc4b2a76", retry_count=2):
            logger.info("dispatch.started")  # Includes message_id and retry_count
    """
    old_message_id = _message_id.get()
    old_retry_count = _retry_count.get()

    try:
        if message_id is not None:
            _message_id.set(message_id)
        if retry_count is not None:
            _retry_count.set(retry_count)
        yield
    finally:
        _message_id.set(old_message_id)
        _retry_count.set(old_retry_count)


# Development mode unless LOG_JSON is set
configure_logging()
