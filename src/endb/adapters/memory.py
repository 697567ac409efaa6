"""In-memory adapter backed by a mutable mapping.

The mapping defaults to a plain dict, or to a ``cachetools.LRUCache`` when
``max_entries`` is set. Any ``MutableMapping`` works, a ``TTLCache`` included.
Several Endb instances may share one mapping; namespaces keep them apart.
Not durable across process restarts.
"""

import asyncio
from collections.abc import MutableMapping
from typing import Optional

from cachetools import LRUCache

from endb.adapters.base import BaseAdapter
from endb.config import EndbOptions
from endb.errors import EndbTypeError
from endb.namespace import matches_namespace


class MemoryAdapter(BaseAdapter):
    """Adapter storing encoded values in a process-local mapping.

    Uses an asyncio lock around the mapping so scans and writes from
    concurrent tasks never interleave.

    Attributes:
        store: The underlying mapping of physical key to encoded value
    """

    name = "memory"

    def __init__(
        self,
        options: Optional[EndbOptions] = None,
        store: Optional[MutableMapping] = None,
    ) -> None:
        """Initialize the memory adapter.

        Args:
            options: Connection descriptor
            store: Mapping to use; defaults to ``options.store`` or a new
                dict, bounded by ``options.max_entries`` when that is set

        Raises:
            EndbTypeError: If the store is not a MutableMapping
        """
        super().__init__(options)
        if store is None:
            store = self.options.store
        if store is None:
            store = _default_store(self.options.max_entries)
        if not isinstance(store, MutableMapping):
            raise EndbTypeError(
                f"store must be a MutableMapping, got {type(store).__name__}", field="store"
            )
        self.store = store
        self._lock = asyncio.Lock()

    async def _connect(self) -> None:
        return None

    async def _get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self.store.get(key)

    async def _set(self, key: str, value: str) -> None:
        async with self._lock:
            self.store[key] = value

    async def _delete(self, key: str) -> bool:
        async with self._lock:
            if key not in self.store:
                return False
            del self.store[key]
            return True

    async def _clear(self) -> None:
        async with self._lock:
            for key in [k for k in self.store if self._owns(k)]:
                self.store.pop(key, None)

    async def _all(self) -> dict[str, str]:
        async with self._lock:
            return {key: value for key, value in list(self.store.items()) if self._owns(key)}

    def _owns(self, key: object) -> bool:
        # Shared mappings may hold foreign, non-text keys
        return isinstance(key, str) and matches_namespace(key, self.namespace)


def _default_store(max_entries: Optional[int]) -> MutableMapping:
    if max_entries is None:
        return {}
    return LRUCache(maxsize=max_entries)
