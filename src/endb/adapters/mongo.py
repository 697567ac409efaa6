"""Document-store adapter (MongoDB through pymongo's asyncio client)."""

import re
from typing import Any, Optional

from pymongo import AsyncMongoClient

from endb.adapters.base import BaseAdapter
from endb.config import EndbOptions
from endb.namespace import namespace_prefix

DEFAULT_DATABASE = "endb"


class MongoAdapter(BaseAdapter):
    """MongoDB adapter for ``mongodb://`` URIs.

    Stores documents shaped ``{"key": <physical key>, "value": <encoded>}``
    in the ``collection`` option's collection of the URI's database, with a
    unique index on ``key``. ``create_index`` is idempotent, so concurrent
    startups converge on one index.

    Attributes:
        client: Async Mongo client (created on connect unless injected)
        collection: Collection handle, available once connected
    """

    name = "mongo"
    default_uri = "mongodb://127.0.0.1:27017"

    def __init__(self, options: Optional[EndbOptions] = None, client: Optional[Any] = None) -> None:
        """Initialize the Mongo adapter.

        Args:
            options: Connection descriptor
            client: Existing ``AsyncMongoClient`` (or compatible) to use
        """
        super().__init__(options)
        self.client = client
        self.collection: Any = None
        self._owns_client = client is None

    @property
    def uri(self) -> str:
        return self.options.uri or self.default_uri

    def _namespace_filter(self) -> dict[str, Any]:
        return {"key": {"$regex": f"^{re.escape(namespace_prefix(self.namespace))}"}}

    async def _connect(self) -> None:
        if self.client is None:
            self.client = AsyncMongoClient(self.uri)
        await self.client.admin.command("ping")
        database = self.client.get_default_database(default=DEFAULT_DATABASE)
        self.collection = database[self.options.collection]
        await self.collection.create_index("key", unique=True)

    async def _get(self, key: str) -> Optional[str]:
        doc = await self.collection.find_one({"key": key})
        return None if doc is None else doc.get("value")

    async def _set(self, key: str, value: str) -> None:
        await self.collection.update_one({"key": key}, {"$set": {"value": value}}, upsert=True)

    async def _delete(self, key: str) -> bool:
        result = await self.collection.delete_one({"key": key})
        return result.deleted_count > 0

    async def _clear(self) -> None:
        await self.collection.delete_many(self._namespace_filter())

    async def _all(self) -> dict[str, str]:
        entries: dict[str, str] = {}
        async for doc in self.collection.find(self._namespace_filter()):
            entries[doc["key"]] = doc.get("value")
        return entries

    async def _close(self) -> None:
        if self.client is not None and self._owns_client:
            await self.client.close()
