"""Cache-server adapter (Redis through redis.asyncio).

Each physical key is a native Redis string key. Redis has no scoped
enumeration, so a side set named ``namespace:<ns>`` records the member keys
of every namespace; ``clear()`` and ``all()`` work from that set.
"""

from typing import Any, Optional

from redis.asyncio import Redis

from endb.adapters.base import BaseAdapter
from endb.config import EndbOptions
from endb.namespace import redis_namespace_set


class RedisAdapter(BaseAdapter):
    """Redis adapter for ``redis://`` and ``rediss://`` URIs.

    Attributes:
        client: Async Redis client (created on connect unless injected)
    """

    name = "redis"
    default_uri = "redis://localhost:6379"

    def __init__(self, options: Optional[EndbOptions] = None, client: Optional[Any] = None) -> None:
        """Initialize the Redis adapter.

        Args:
            options: Connection descriptor
            client: Existing ``redis.asyncio.Redis`` (or compatible) client
        """
        super().__init__(options)
        self.client = client
        self._owns_client = client is None

    @property
    def uri(self) -> str:
        return self.options.uri or self.default_uri

    @property
    def members_key(self) -> str:
        return redis_namespace_set(self.namespace)

    async def _connect(self) -> None:
        if self.client is None:
            self.client = Redis.from_url(self.uri, decode_responses=True)
        await self.client.ping()

    async def _get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def _set(self, key: str, value: str) -> None:
        await self.client.set(key, value)
        await self.client.sadd(self.members_key, key)

    async def _delete(self, key: str) -> bool:
        removed = await self.client.delete(key)
        await self.client.srem(self.members_key, key)
        return removed > 0

    async def _clear(self) -> None:
        members = await self.client.smembers(self.members_key)
        await self.client.delete(*members, self.members_key)

    async def _all(self) -> dict[str, str]:
        members = sorted(await self.client.smembers(self.members_key))
        if not members:
            return {}
        values = await self.client.mget(members)
        return {key: value for key, value in zip(members, values) if value is not None}

    async def _close(self) -> None:
        if self.client is not None and self._owns_client:
            await self.client.aclose()
