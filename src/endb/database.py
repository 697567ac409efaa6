"""The Endb façade: one key-value contract over every backend.

This module composes the connection options, the namespacer, the value
codec and the resolved backend adapter behind a small async API.
"""

import json
from datetime import datetime, timezone
from types import TracebackType
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

from endb.adapters import BaseAdapter, resolve_adapter
from endb.codec import ABSENT, CallableCodec, Codec, JsonCodec
from endb.config import EndbOptions, build_options
from endb.errors import EndbError, EndbOperationError, EndbSerializationError, EndbTypeError
from endb.namespace import Key, strip_namespace, validate_key, wrap
from endb.observability.logging import get_logger, namespace_context

logger = get_logger(__name__)

T = TypeVar("T")

ErrorHandler = Callable[[EndbError], None]


class Endb:
    """Asynchronous key-value database over a pluggable backend.

    The backend is chosen once, at construction, from the URI scheme or
    the ``adapter`` option, and connects lazily on first use. Every key is
    namespaced before it reaches the backend and every value round-trips
    through the codec.

    Key-taking methods validate the key when they are called and return an
    awaitable for the backend work, so a bad key raises ``EndbTypeError``
    immediately.

    Backend failures are re-raised to the caller and also reported to
    ``on_error`` handlers, so long-lived callers can watch backend health.

    Example:
        >>> db = Endb("sqlite://data/endb.db", namespace="users")
        >>> await db.set("foo", "bar")
        True
        >>> await db.get("foo")
        'bar'
        >>> await db.get("missing")
        ABSENT
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        *,
        options: Optional[EndbOptions] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the database and resolve its adapter.

        Args:
            uri: Connection string such as ``redis://localhost:6379``
            options: Prebuilt options; exclusive with ``uri``/keyword options
            **kwargs: Any EndbOptions field

        Raises:
            EndbTypeError: If the options are invalid or the adapter is unknown
            EndbDependencyError: If the adapter's driver is not installed
        """
        if options is not None and (uri is not None or kwargs):
            raise EndbTypeError("pass either options or uri/keyword options, not both")
        self._options = options if options is not None else build_options(uri, **kwargs)

        self._codec: Codec
        if self._options.serialize is not None and self._options.deserialize is not None:
            self._codec = CallableCodec(self._options.serialize, self._options.deserialize)
        else:
            self._codec = JsonCodec()

        self._error_handlers: list[ErrorHandler] = []
        self._adapter = resolve_adapter(self._options)
        self._adapter.on_error(self._emit_error)

    @classmethod
    def multi(
        cls, names: Iterable[str], uri: Optional[str] = None, **kwargs: Any
    ) -> dict[str, "Endb"]:
        """Create one database per namespace name over the same descriptor.

        Args:
            names: Namespace names
            uri: Connection string shared by every instance
            **kwargs: Options shared by every instance

        Returns:
            Mapping of name to Endb instance

        Raises:
            EndbTypeError: If names is empty or holds non-string items, or if
                a namespace is passed in kwargs
        """
        names = list(names) if not isinstance(names, str) else []
        if not names or not all(isinstance(name, str) for name in names):
            raise EndbTypeError("names must be a non-empty list of strings", field="names")
        if "namespace" in kwargs:
            raise EndbTypeError("namespace is set per name by multi()", field="namespace")
        return {name: cls(uri, namespace=name, **kwargs) for name in names}

    @property
    def options(self) -> EndbOptions:
        return self._options

    @property
    def namespace(self) -> str:
        return self._options.namespace

    @property
    def adapter(self) -> BaseAdapter:
        return self._adapter

    @property
    def adapter_name(self) -> str:
        return self._adapter.name

    def on_error(self, handler: ErrorHandler) -> None:
        """Subscribe to backend errors (connection, operation, corrupt records)."""
        self._error_handlers.append(handler)

    def remove_error_handler(self, handler: ErrorHandler) -> None:
        self._error_handlers.remove(handler)

    def _emit_error(self, error: EndbError) -> None:
        logger.warning(
            "endb_error",
            adapter=self._adapter.name,
            code=error.code,
            error=error.message,
        )
        for handler in list(self._error_handlers):
            try:
                handler(error)
            except Exception:
                logger.exception("error_handler_failed", adapter=self._adapter.name)

    def _prefix_key(self, key: Key) -> str:
        return wrap(self.namespace, validate_key(key))

    async def _call(self, operation: Callable[..., Awaitable[T]], *args: Any) -> T:
        with namespace_context(self.namespace):
            await self._adapter.connect()
            try:
                return await operation(*args)
            except (EndbOperationError, EndbSerializationError) as exc:
                self._emit_error(exc)
                raise

    async def ready(self) -> None:
        """Wait until the backend is connected and its schema exists.

        Raises:
            EndbConnectionError: If the backend could not be initialized
            EndbDestroyedError: If the database was closed
        """
        with namespace_context(self.namespace):
            await self._adapter.connect()

    def get(self, key: Key) -> Awaitable[Any]:
        """Read the value stored under ``key``.

        Returns:
            Awaitable resolving to the value, or ``ABSENT`` if never set

        Raises:
            EndbTypeError: If the key is not a string or integer
        """
        return self._call(self._get, self._prefix_key(key))

    async def _get(self, physical_key: str) -> Any:
        return self._codec.decode(await self._adapter.get(physical_key))

    def set(self, key: Key, value: Any) -> Awaitable[bool]:
        """Store ``value`` under ``key``, overwriting any previous value.

        Returns:
            Awaitable resolving to True once the backend accepted the write

        Raises:
            EndbTypeError: If the key is invalid or ``value`` is ``ABSENT``
        """
        physical_key = self._prefix_key(key)
        if value is ABSENT:
            raise EndbTypeError("cannot store ABSENT; use delete() instead")
        return self._call(self._set, physical_key, value)

    async def _set(self, physical_key: str, value: Any) -> bool:
        return await self._adapter.set(physical_key, self._codec.encode(value))

    def delete(self, key: Key) -> Awaitable[bool]:
        """Delete ``key``.

        Returns:
            Awaitable resolving to True if the key existed, False otherwise
        """
        return self._call(self._adapter.delete, self._prefix_key(key))

    def has(self, key: Key) -> Awaitable[bool]:
        """Check whether ``key`` holds a value (``None`` included)."""
        return self._call(self._has, self._prefix_key(key))

    async def _has(self, physical_key: str) -> bool:
        return (await self._adapter.get(physical_key)) is not ABSENT

    async def clear(self) -> None:
        """Delete every key of this namespace; other namespaces are untouched."""
        await self._call(self._adapter.clear)

    async def all(self) -> dict[str, Any]:
        """Return every key of this namespace with its decoded value."""
        return await self._call(self._all)

    async def _all(self) -> dict[str, Any]:
        entries = await self._adapter.all()
        return {
            strip_namespace(key, self.namespace): self._codec.decode(value)
            for key, value in entries.items()
        }

    async def keys(self) -> list[str]:
        """Return the logical keys of this namespace, sorted."""
        entries = await self._call(self._adapter.all)
        return sorted(strip_namespace(key, self.namespace) for key in entries)

    async def count(self) -> int:
        return len(await self.keys())

    def find(self, prefix: Key) -> Awaitable[dict[str, Any]]:
        """Return the entries whose logical key starts with ``prefix``.

        Raises:
            EndbTypeError: If the prefix is not a string or integer
        """
        return self._call(self._find, str(validate_key(prefix)))

    async def _find(self, prefix: str) -> dict[str, Any]:
        entries = await self._all()
        return {key: value for key, value in entries.items() if key.startswith(prefix)}

    async def export(self) -> str:
        """Export this namespace as a JSON document.

        Values are exported in their encoded form so binary payloads survive.

        Returns:
            Pretty-printed JSON with namespace, adapter, timestamp and data
        """
        entries = await self._call(self._adapter.all)
        return json.dumps(
            {
                "namespace": self.namespace,
                "adapter": self.adapter_name,
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "data": {
                    strip_namespace(key, self.namespace): value
                    for key, value in sorted(entries.items())
                },
            },
            indent=2,
        )

    async def close(self) -> None:
        """Close the backend connection. Later calls raise EndbDestroyedError."""
        await self._adapter.close()

    async def destroy(self) -> None:
        """Delete every key of this namespace, then close."""
        await self.clear()
        await self.close()

    async def __aenter__(self) -> "Endb":
        await self.ready()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Endb(adapter={self.adapter_name!r}, namespace={self.namespace!r})"
