"""Tests for the in-memory adapter."""

import pytest
from cachetools import LRUCache

from endb.adapters.memory import MemoryAdapter
from endb.codec import ABSENT
from endb.config import EndbOptions
from endb.errors import EndbTypeError


class TestMemoryAdapter:
    """Tests for MemoryAdapter."""

    @pytest.fixture
    async def adapter(self) -> MemoryAdapter:
        """Create a connected adapter over a fresh dict."""
        adapter = MemoryAdapter()
        await adapter.connect()
        return adapter

    @pytest.mark.asyncio
    async def test_set_and_get(self, adapter: MemoryAdapter) -> None:
        await adapter.set("endb:foo", '"bar"')

        assert await adapter.get("endb:foo") == '"bar"'
        assert adapter.store == {"endb:foo": '"bar"'}

    @pytest.mark.asyncio
    async def test_get_missing(self, adapter: MemoryAdapter) -> None:
        assert await adapter.get("endb:missing") is ABSENT

    @pytest.mark.asyncio
    async def test_overwrite_keeps_one_entry(self, adapter: MemoryAdapter) -> None:
        await adapter.set("endb:foo", "1")
        await adapter.set("endb:foo", "2")

        assert await adapter.all() == {"endb:foo": "2"}

    @pytest.mark.asyncio
    async def test_delete(self, adapter: MemoryAdapter) -> None:
        await adapter.set("endb:foo", "1")

        assert await adapter.delete("endb:foo") is True
        assert await adapter.delete("endb:foo") is False

    @pytest.mark.asyncio
    async def test_delete_never_set(self, adapter: MemoryAdapter) -> None:
        assert await adapter.delete("endb:ghost") is False


class TestSharedStore:
    """Several namespaces sharing one mapping."""

    @pytest.mark.asyncio
    async def test_clear_only_touches_own_namespace(self) -> None:
        store: dict = {}
        users = MemoryAdapter(EndbOptions(namespace="users"), store=store)
        posts = MemoryAdapter(EndbOptions(namespace="posts"), store=store)
        await users.connect()
        await posts.connect()

        await users.set("users:a", "1")
        await posts.set("posts:a", "2")
        await users.clear()

        assert store == {"posts:a": "2"}
        assert await users.all() == {}
        assert await posts.all() == {"posts:a": "2"}

    @pytest.mark.asyncio
    async def test_prefix_namespace_not_matched(self) -> None:
        """Namespace "a" must not see keys of namespace "ab"."""
        store = {"ab:x": "1", "a:y": "2"}
        adapter = MemoryAdapter(EndbOptions(namespace="a"), store=store)
        await adapter.connect()

        assert await adapter.all() == {"a:y": "2"}

    @pytest.mark.asyncio
    async def test_foreign_non_text_keys_ignored(self) -> None:
        store = {1: "x", "endb:k": "v"}
        adapter = MemoryAdapter(store=store)
        await adapter.connect()

        assert await adapter.all() == {"endb:k": "v"}
        await adapter.clear()
        assert store == {1: "x"}

    @pytest.mark.asyncio
    async def test_store_from_options(self) -> None:
        store: dict = {}
        adapter = MemoryAdapter(EndbOptions(store=store))
        await adapter.connect()

        await adapter.set("endb:k", "1")

        assert store == {"endb:k": "1"}

    @pytest.mark.asyncio
    async def test_lru_cache_store(self) -> None:
        """A bounded cachetools mapping evicts the least recently used entry."""
        store: LRUCache = LRUCache(maxsize=2)
        adapter = MemoryAdapter(store=store)
        await adapter.connect()

        await adapter.set("endb:a", "1")
        await adapter.set("endb:b", "2")
        await adapter.set("endb:c", "3")

        assert await adapter.get("endb:a") is ABSENT
        assert await adapter.all() == {"endb:b": "2", "endb:c": "3"}

    @pytest.mark.asyncio
    async def test_max_entries_bounds_default_store(self) -> None:
        adapter = MemoryAdapter(EndbOptions(max_entries=2))
        await adapter.connect()

        await adapter.set("endb:a", "1")
        await adapter.set("endb:b", "2")
        await adapter.get("endb:a")
        await adapter.set("endb:c", "3")

        assert isinstance(adapter.store, LRUCache)
        assert await adapter.all() == {"endb:a": "1", "endb:c": "3"}

    def test_default_store_unbounded(self) -> None:
        assert type(MemoryAdapter().store) is dict

    def test_invalid_store_rejected(self) -> None:
        with pytest.raises(EndbTypeError) as exc_info:
            MemoryAdapter(store=["not", "a", "mapping"])  # type: ignore[arg-type]

        assert exc_info.value.field == "store"
