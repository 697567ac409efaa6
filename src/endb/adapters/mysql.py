"""MySQL adapter (aiomysql driver)."""

from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.sql import Executable

from endb.adapters.sql import SqlAdapter, driver_url


class MysqlAdapter(SqlAdapter):
    """MySQL adapter for ``mysql://`` URIs.

    MySQL has no ``ON CONFLICT`` clause; upserts use
    ``INSERT ... ON DUPLICATE KEY UPDATE``. Values are bound as parameters,
    so backslashes need no escaping.
    """

    name = "mysql"
    default_uri = "mysql://localhost"

    def database_url(self) -> str:
        return driver_url(self.uri, "mysql+aiomysql")

    def upsert_statement(self, key: str, value: str) -> Executable:
        stmt = mysql_insert(self.table).values(key=key, value=value)
        return stmt.on_duplicate_key_update(value=stmt.inserted.value)
