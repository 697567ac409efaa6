"""Embedded-file SQL adapter (SQLite through aiosqlite)."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql import Executable

from endb.adapters.sql import SqlAdapter

_MEMORY_PATHS = ("", ":memory:")


class SqliteAdapter(SqlAdapter):
    """SQLite adapter for ``sqlite://<path>`` URIs.

    An empty path or ``:memory:`` opens a private in-memory database.
    File databases get their parent directory created, a lock wait
    ``timeout`` and, unless ``wal`` is disabled, write-ahead logging.
    """

    name = "sqlite"
    default_uri = "sqlite://:memory:"

    @property
    def path(self) -> str:
        """Database file path: everything after ``sqlite://``.

        ``sqlite://data/endb.db`` is relative, ``sqlite:///var/endb.db`` absolute
        and ``sqlite://~/endb.db`` is under the home directory.
        """
        path = self.uri
        for prefix in ("sqlite+aiosqlite://", "sqlite://"):
            if path.startswith(prefix):
                path = path[len(prefix) :]
                break
        return os.path.expanduser(path)

    @property
    def is_memory(self) -> bool:
        return self.path in _MEMORY_PATHS

    def database_url(self) -> str:
        if self.is_memory:
            return "sqlite+aiosqlite://"
        return f"sqlite+aiosqlite:///{self.path}"

    def engine_kwargs(self) -> dict[str, Any]:
        # SQLite uses its own pool; the lock wait timeout is in seconds
        return {
            "echo": self.echo,
            "connect_args": {"timeout": self.options.timeout / 1000},
        }

    def create_engine(self) -> AsyncEngine:
        if not self.is_memory:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        engine = super().create_engine()
        if self.options.wal and not self.is_memory:
            event.listen(engine.sync_engine, "connect", _enable_wal)
        return engine

    def upsert_statement(self, key: str, value: str) -> Executable:
        stmt = sqlite_insert(self.table).values(key=key, value=value)
        return stmt.on_conflict_do_update(
            index_elements=[self.table.c.key],
            set_={"value": stmt.excluded.value},
        )


def _enable_wal(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()
