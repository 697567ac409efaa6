"""Abstract backend adapter.

Every store family implements the same small async contract over
namespaced physical keys and encoded text values. This base class owns the
lifecycle shared by all of them:

    UNINITIALIZED -> CONNECTING -> READY -> CLOSED
                          \\-> FAILED

Concrete adapters implement the underscore hooks (``_connect``, ``_get``,
``_set``, ``_delete``, ``_clear``, ``_all``, ``_close``); the public methods
add state checks and translate driver exceptions into ``EndbOperationError``.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from endb.codec import ABSENT, EncodedValue
from endb.config import EndbOptions
from endb.errors import (
    EndbConnectionError,
    EndbDestroyedError,
    EndbError,
    EndbNotReadyError,
    EndbOperationError,
)
from endb.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ErrorHandler = Callable[[EndbError], None]


class AdapterState(str, Enum):
    """Lifecycle state of an adapter instance."""

    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class BaseAdapter(ABC):
    """Abstract key-value adapter scoped to one namespace.

    Attributes:
        name: Adapter family name used in logs and errors
        supports_enumeration: Whether ``all()`` is available
        options: Connection descriptor the adapter was built from
        namespace: Namespace whose entries ``clear()`` and ``all()`` touch
    """

    name: str = "base"
    supports_enumeration: bool = True

    def __init__(self, options: Optional[EndbOptions] = None) -> None:
        """Initialize adapter state without touching the backend.

        Args:
            options: Connection descriptor (defaults to EndbOptions())
        """
        self.options = options or EndbOptions()
        self.namespace = self.options.namespace
        self._state = AdapterState.UNINITIALIZED
        self._error: Optional[EndbConnectionError] = None
        self._connect_lock = asyncio.Lock()
        self._error_handlers: list[ErrorHandler] = []

    @property
    def state(self) -> AdapterState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is AdapterState.READY

    @property
    def is_closed(self) -> bool:
        return self._state is AdapterState.CLOSED

    def on_error(self, handler: ErrorHandler) -> None:
        """Subscribe to connection errors reported by this adapter."""
        self._error_handlers.append(handler)

    def remove_error_handler(self, handler: ErrorHandler) -> None:
        self._error_handlers.remove(handler)

    def _emit_error(self, error: EndbError) -> None:
        for handler in list(self._error_handlers):
            try:
                handler(error)
            except Exception:
                logger.exception("error_handler_failed", adapter=self.name)

    async def connect(self) -> None:
        """Open the connection and create the schema, once.

        Safe to call repeatedly and concurrently: later callers wait for
        the first initialization and share its outcome.

        Raises:
            EndbDestroyedError: If the adapter was closed
            EndbConnectionError: If the backend could not be initialized
        """
        if self._state is AdapterState.READY:
            return
        async with self._connect_lock:
            if self._state is AdapterState.READY:
                return
            if self._state is AdapterState.CLOSED:
                raise EndbDestroyedError(self.name)
            if self._state is AdapterState.FAILED and self._error is not None:
                raise self._error

            self._state = AdapterState.CONNECTING
            try:
                await self._connect()
            except Exception as exc:
                error = EndbConnectionError(self.name, str(exc) or type(exc).__name__)
                self._error = error
                self._state = AdapterState.FAILED
                logger.error(
                    "adapter_connection_failed",
                    adapter=self.name,
                    namespace=self.namespace,
                    error=str(exc),
                )
                self._emit_error(error)
                raise error from exc

            self._state = AdapterState.READY
            logger.info("adapter_ready", adapter=self.name, namespace=self.namespace)

    def _ensure_ready(self) -> None:
        if self._state is AdapterState.CLOSED:
            raise EndbDestroyedError(self.name)
        if self._state is AdapterState.FAILED and self._error is not None:
            raise self._error
        if self._state is not AdapterState.READY:
            raise EndbNotReadyError(self.name)

    async def _run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        self._ensure_ready()
        try:
            return await call()
        except EndbError:
            raise
        except Exception as exc:
            raise EndbOperationError(self.name, operation, exc) from exc

    async def get(self, key: str) -> EncodedValue:
        """Read the encoded value stored under a physical key.

        Returns:
            Encoded text, or ``ABSENT`` if the key does not exist
        """
        value = await self._run("get", lambda: self._get(key))
        return ABSENT if value is None else value

    async def set(self, key: str, value: str) -> bool:
        """Insert or overwrite the value stored under a physical key.

        Returns:
            True once the backend accepted the write
        """
        await self._run("set", lambda: self._set(key, value))
        return True

    async def delete(self, key: str) -> bool:
        """Delete a physical key.

        Returns:
            True if an entry existed and was removed, False otherwise
        """
        return bool(await self._run("delete", lambda: self._delete(key)))

    async def clear(self) -> None:
        """Delete every entry of this adapter's namespace."""
        await self._run("clear", self._clear)

    async def all(self) -> dict[str, str]:
        """Return every entry of this adapter's namespace.

        Returns:
            Mapping of physical key to encoded value
        """
        if not self.supports_enumeration:
            raise NotImplementedError(f"Adapter '{self.name}' cannot enumerate entries")
        return await self._run("all", self._all)

    async def close(self) -> None:
        """Release the connection. Terminal: the adapter cannot reconnect."""
        async with self._connect_lock:
            if self._state is AdapterState.CLOSED:
                return
            was_open = self._state in (AdapterState.READY, AdapterState.FAILED)
            self._state = AdapterState.CLOSED
        if was_open:
            await self._close()
        logger.info("adapter_closed", adapter=self.name, namespace=self.namespace)

    @abstractmethod
    async def _connect(self) -> None:
        """Open the backend handle and create the table/collection if missing."""

    @abstractmethod
    async def _get(self, key: str) -> Any:
        """Return the stored text, or None/ABSENT when missing."""

    @abstractmethod
    async def _set(self, key: str, value: str) -> None:
        """Upsert a value."""

    @abstractmethod
    async def _delete(self, key: str) -> bool:
        """Delete a key, reporting whether it existed."""

    @abstractmethod
    async def _clear(self) -> None:
        """Delete every key of the namespace."""

    @abstractmethod
    async def _all(self) -> dict[str, str]:
        """Return the namespace's physical keys and encoded values."""

    async def _close(self) -> None:
        """Release the backend handle."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(namespace={self.namespace!r}, state={self._state.value})"
