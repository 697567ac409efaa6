"""Relational adapters built on SQLAlchemy's asyncio engine.

All SQL families share one physical schema: a single table with a bounded
``key`` primary key and an unbounded ``value`` text column. Dialect
subclasses only decide the database URL, the engine arguments and the
upsert statement.
"""

from abc import abstractmethod
from typing import Any, Optional

from sqlalchemy import Column, MetaData, String, Table, Text, delete, select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql import Executable

from endb.adapters.base import BaseAdapter
from endb.config import EndbOptions
from endb.namespace import namespace_prefix


def build_table(name: str, key_size: int, metadata: Optional[MetaData] = None) -> Table:
    """Define the ``(key PRIMARY KEY, value TEXT)`` table.

    Args:
        name: Table name
        key_size: Length of the ``VARCHAR`` key column
        metadata: Metadata registry to attach the table to

    Returns:
        SQLAlchemy Table
    """
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("key", String(key_size), primary_key=True),
        Column("value", Text),
    )


def driver_url(uri: str, driver: str) -> str:
    """Rewrite ``scheme://rest`` to ``driver://rest`` unless a driver is already named.

    Example:
        >>> driver_url("postgres://user@db/app", "postgresql+asyncpg")
        'postgresql+asyncpg://user@db/app'
    """
    scheme, sep, rest = uri.partition("://")
    if not sep or "+" in scheme:
        return uri
    return f"{driver}://{rest}"


class SqlAdapter(BaseAdapter):
    """Base adapter for SQL backends.

    Each operation runs in its own transaction, committed before the call
    returns. Schema creation uses ``CREATE TABLE IF NOT EXISTS`` so that
    processes starting concurrently against the same database never race.

    Example:
        >>> adapter = SqliteAdapter(EndbOptions(uri="sqlite://data/endb.db"))
        >>> await adapter.connect()
        >>> await adapter.set("endb:foo", '"bar"')
    """

    name = "sql"
    default_uri: str = ""

    def __init__(
        self,
        options: Optional[EndbOptions] = None,
        engine: Optional[AsyncEngine] = None,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
    ) -> None:
        """Initialize the SQL adapter.

        Args:
            options: Connection descriptor
            engine: Existing async engine to use instead of creating one
            pool_size: Connection pool size (ignored for SQLite)
            max_overflow: Maximum overflow connections (ignored for SQLite)
            echo: Whether to log SQL statements
        """
        super().__init__(options)
        self.table = build_table(self.options.table, self.options.key_size)
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.echo = echo
        self._engine = engine
        self._owns_engine = engine is None

    @property
    def engine(self) -> Optional[AsyncEngine]:
        return self._engine

    @property
    def uri(self) -> str:
        return self.options.uri or self.default_uri

    @abstractmethod
    def database_url(self) -> str:
        """SQLAlchemy URL including the async driver."""

    def engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
        }

    @abstractmethod
    def upsert_statement(self, key: str, value: str) -> Executable:
        """Insert-or-overwrite statement for this dialect."""

    def create_engine(self) -> AsyncEngine:
        return create_async_engine(self.database_url(), **self.engine_kwargs())

    async def _connect(self) -> None:
        if self._engine is None:
            self._engine = self.create_engine()
        async with self._engine.begin() as conn:
            await conn.execute(CreateTable(self.table, if_not_exists=True))

    async def _get(self, key: str) -> Optional[str]:
        stmt = select(self.table.c.value).where(self.table.c.key == key)
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            return result.scalar_one_or_none()

    async def _set(self, key: str, value: str) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(self.upsert_statement(key, value))

    async def _delete(self, key: str) -> bool:
        stmt = delete(self.table).where(self.table.c.key == key)
        async with self._engine.begin() as conn:
            result = await conn.execute(stmt)
            return result.rowcount > 0

    def _in_namespace(self) -> Any:
        return self.table.c.key.startswith(namespace_prefix(self.namespace), autoescape=True)

    async def _clear(self) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(delete(self.table).where(self._in_namespace()))

    async def _all(self) -> dict[str, str]:
        stmt = select(self.table.c.key, self.table.c.value).where(self._in_namespace())
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            return {key: value for key, value in result}

    async def _close(self) -> None:
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()

    async def health_check(self) -> bool:
        """Check database connectivity.

        Returns:
            True if the database answered

        Raises:
            EndbNotReadyError: If the adapter is not connected
        """
        self._ensure_ready()
        async with self._engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return True
