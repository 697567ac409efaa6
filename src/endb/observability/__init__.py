"""Observability helpers for endb (structured logging)."""

from endb.observability.logging import (
    get_logger,
    get_namespace,
    namespace_context,
    setup_logging,
)

__all__ = [
    "get_logger",
    "get_namespace",
    "namespace_context",
    "setup_logging",
]
