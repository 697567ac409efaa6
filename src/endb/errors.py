"""Custom exceptions for the endb key-value layer.

This module defines the exception hierarchy shared by the façade, the
codec and every backend adapter. Each error carries a human-readable
message and a machine-readable code.

A missing key is never an error: lookups resolve to ``ABSENT`` instead.
"""

from typing import Optional


class EndbError(Exception):
    """Base exception for all endb errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
    """

    def __init__(self, message: str, code: str = "endb_error") -> None:
        """Initialize endb error.

        Args:
            message: Human-readable error description
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code


class EndbConnectionError(EndbError):
    """Raised when a backend is unreachable or its schema cannot be created.

    Fatal for the adapter instance: it is emitted once to error listeners
    and every later operation on the same adapter fails with it.
    """

    def __init__(self, adapter: str, message: str) -> None:
        """Initialize connection error.

        Args:
            adapter: Name of the adapter that failed to connect
            message: Description of the underlying failure
        """
        super().__init__(
            message=f"Adapter '{adapter}' could not connect: {message}",
            code="connection_error",
        )
        self.adapter = adapter


class EndbNotReadyError(EndbError):
    """Raised when an adapter is used before its initialization completed."""

    def __init__(self, adapter: str) -> None:
        super().__init__(
            message=f"Adapter '{adapter}' is not ready; await connect() first",
            code="not_ready",
        )
        self.adapter = adapter


class EndbDestroyedError(EndbError):
    """Raised when an adapter or database is used after close()."""

    def __init__(self, adapter: str) -> None:
        super().__init__(
            message=f"Adapter '{adapter}' has been closed",
            code="destroyed",
        )
        self.adapter = adapter


class EndbTypeError(EndbError, TypeError):
    """Raised when a caller supplies a key or option of the wrong type.

    Always reported to the caller at call time, never coerced.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        """Initialize type validation error.

        Args:
            message: Description of the validation failure
            field: Optional name of the offending option
        """
        if field:
            message = f"Invalid value for '{field}': {message}"
        super().__init__(message=message, code="type_error")
        self.field = field


class EndbSerializationError(EndbError, ValueError):
    """Raised when a value cannot be encoded or stored text cannot be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="serialization_error")


class EndbOperationError(EndbError):
    """Raised when a backend driver fails an individual operation.

    The driver exception is kept as ``original`` and chained as the cause.
    """

    def __init__(self, adapter: str, operation: str, original: BaseException) -> None:
        """Initialize operation error.

        Args:
            adapter: Name of the adapter running the operation
            operation: Operation name (get, set, delete, clear, all)
            original: Exception raised by the driver
        """
        super().__init__(
            message=f"Adapter '{adapter}' failed to {operation}: {original}",
            code="operation_error",
        )
        self.adapter = adapter
        self.operation = operation
        self.original = original


class EndbDependencyError(EndbError, ImportError):
    """Raised when the driver for a requested adapter is not installed."""

    def __init__(self, adapter: str, extra: str) -> None:
        super().__init__(
            message=(
                f"Adapter '{adapter}' requires optional dependencies; "
                f'run "pip install endb[{extra}]" to install them'
            ),
            code="missing_dependency",
        )
        self.adapter = adapter
        self.extra = extra
