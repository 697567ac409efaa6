"""Backend adapters and the registry that selects them.

Adapter modules are imported by their factory only when that family is
requested, so a missing optional driver never affects the other families.
"""

from typing import Callable

from endb.adapters.base import AdapterState, BaseAdapter
from endb.config import EndbOptions
from endb.errors import EndbDependencyError, EndbTypeError

AdapterFactory = Callable[[EndbOptions], BaseAdapter]


def _memory(options: EndbOptions) -> BaseAdapter:
    from endb.adapters.memory import MemoryAdapter

    return MemoryAdapter(options)


def _sqlite(options: EndbOptions) -> BaseAdapter:
    try:
        import aiosqlite  # noqa: F401
    except ImportError as exc:
        raise EndbDependencyError("sqlite", "sqlite") from exc
    from endb.adapters.sqlite import SqliteAdapter

    return SqliteAdapter(options)


def _postgres(options: EndbOptions) -> BaseAdapter:
    try:
        import asyncpg  # noqa: F401
    except ImportError as exc:
        raise EndbDependencyError("postgres", "postgres") from exc
    from endb.adapters.postgres import PostgresAdapter

    return PostgresAdapter(options)


def _mysql(options: EndbOptions) -> BaseAdapter:
    try:
        import aiomysql  # noqa: F401
    except ImportError as exc:
        raise EndbDependencyError("mysql", "mysql") from exc
    from endb.adapters.mysql import MysqlAdapter

    return MysqlAdapter(options)


def _mongo(options: EndbOptions) -> BaseAdapter:
    try:
        import pymongo  # noqa: F401
    except ImportError as exc:
        raise EndbDependencyError("mongo", "mongo") from exc
    from endb.adapters.mongo import MongoAdapter

    return MongoAdapter(options)


def _redis(options: EndbOptions) -> BaseAdapter:
    try:
        import redis  # noqa: F401
    except ImportError as exc:
        raise EndbDependencyError("redis", "redis") from exc
    from endb.adapters.redis import RedisAdapter

    return RedisAdapter(options)


ADAPTERS: dict[str, AdapterFactory] = {
    "memory": _memory,
    "sqlite": _sqlite,
    "postgres": _postgres,
    "postgresql": _postgres,
    "mysql": _mysql,
    "mongodb": _mongo,
    "mongo": _mongo,
    "redis": _redis,
    "rediss": _redis,
}


def register_adapter(name: str, factory: AdapterFactory) -> None:
    """Register a factory for an additional adapter family."""
    ADAPTERS[name.lower()] = factory


def resolve_adapter(options: EndbOptions) -> BaseAdapter:
    """Build the adapter named by a connection descriptor.

    Selection order: an adapter instance passed as ``store``, the explicit
    ``adapter`` option, the URI scheme, and finally the in-memory adapter.
    A ``+driver`` suffix on the scheme (``postgresql+asyncpg``) is ignored.

    Args:
        options: Connection descriptor

    Returns:
        An unconnected adapter

    Raises:
        EndbTypeError: If the family is unknown or a supplied adapter uses
            another namespace
        EndbDependencyError: If the family's driver is not installed
    """
    store = options.store
    if isinstance(store, BaseAdapter):
        if store.namespace != options.namespace:
            raise EndbTypeError(
                f"adapter namespace '{store.namespace}' does not match '{options.namespace}'",
                field="store",
            )
        return store

    name = options.adapter_name or "memory"
    if store is not None and name == "memory":
        return _memory(options)

    family = name.split("+", 1)[0]
    factory = ADAPTERS.get(family)
    if factory is None:
        raise EndbTypeError(f"Unknown adapter '{name}'", field="adapter")
    return factory(options)


__all__ = [
    "ADAPTERS",
    "AdapterFactory",
    "AdapterState",
    "BaseAdapter",
    "register_adapter",
    "resolve_adapter",
]
