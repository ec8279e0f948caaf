"""Structured logging for threadstore.

Events go through structlog on top of the standard library ``logging`` module
and come out as one JSON object per line, or as console output during
development. Request-scoped values such as the correlation ID are bound with
``structlog.contextvars`` and merged into every event logged while the
request is being handled.
"""

import logging
import sys
from typing import Any, Optional

import structlog

CORRELATION_ID_KEY = "correlation_id"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _renderer_chain(json_logs: bool) -> list[Any]:
    if json_logs:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.processors.ExceptionPrettyPrinter(), structlog.dev.ConsoleRenderer()]


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog and the root stdlib logger.

    Args:
        log_level: Name of the minimum level to emit (DEBUG ... CRITICAL)
        json_logs: Render JSON lines when True, console output otherwise

    Raises:
        ValueError: If log_level is not a standard level name

    Example:
        >>> setup_logging(log_level="DEBUG", json_logs=False)
        >>> get_logger(__name__).info("conversation_stored", conversation_id=7)
    """
    level = _LEVELS.get(log_level.upper())
    if level is None:
        raise ValueError(f"unknown log level: {log_level}")
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            *_renderer_chain(json_logs),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str) -> None:
    """Bind the correlation ID to every event logged in the current context."""
    structlog.contextvars.bind_contextvars(**{CORRELATION_ID_KEY: correlation_id})


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get(CORRELATION_ID_KEY)


def clear_correlation_id() -> None:
    structlog.contextvars.unbind_contextvars(CORRELATION_ID_KEY)
