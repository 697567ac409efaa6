"""Structured logging configuration with namespace context.

This module sets up structured logging using structlog with JSON output
and automatic injection of the active key namespace.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

import structlog

# Context variable holding the namespace of the operation being logged
namespace_var: ContextVar[Optional[str]] = ContextVar("endb_namespace", default=None)


def add_namespace(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add the active namespace to a log event if one is bound.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Event dictionary to modify

    Returns:
        Modified event dictionary with namespace
    """
    namespace = get_namespace()
    if namespace and "namespace" not in event_dict:
        event_dict["namespace"] = namespace
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output logs in JSON format; otherwise use console format

    Example:
        >>> setup_logging(log_level="DEBUG", json_logs=False)
        >>> logger = get_logger(__name__)
        >>> logger.info("adapter_ready", adapter="sqlite")
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        add_namespace,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.processors.ExceptionPrettyPrinter(),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def get_namespace() -> Optional[str]:
    """Namespace bound by the innermost ``namespace_context``, if any."""
    return namespace_var.get()


@contextmanager
def namespace_context(namespace: str) -> Iterator[None]:
    """Bind ``namespace`` for log events emitted inside the block.

    Example:
        >>> with namespace_context("users"):
        ...     logger.info("cache_miss")  # Will include namespace="users"
    """
    token = namespace_var.set(namespace)
    try:
        yield
    finally:
        namespace_var.reset(token)
