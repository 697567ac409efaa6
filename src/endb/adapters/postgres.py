"""PostgreSQL adapter (asyncpg driver)."""

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.sql import Executable

from endb.adapters.sql import SqlAdapter, driver_url


class PostgresAdapter(SqlAdapter):
    """PostgreSQL adapter for ``postgres://`` and ``postgresql://`` URIs.

    Upserts with ``INSERT ... ON CONFLICT (key) DO UPDATE``.
    """

    name = "postgres"
    default_uri = "postgresql://localhost:5432"

    def database_url(self) -> str:
        return driver_url(self.uri, "postgresql+asyncpg")

    def upsert_statement(self, key: str, value: str) -> Executable:
        stmt = pg_insert(self.table).values(key=key, value=value)
        return stmt.on_conflict_do_update(
            index_elements=[self.table.c.key],
            set_={"value": stmt.excluded.value},
        )
