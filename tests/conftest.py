"""Pytest configuration and shared fixtures for the test suite."""

from pathlib import Path
from typing import AsyncGenerator

import pytest

from endb.adapters.sqlite import SqliteAdapter
from endb.config import EndbOptions

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def sqlite_uri(tmp_path: Path) -> str:
    """URI of a fresh SQLite file inside the test's temporary directory."""
    return f"sqlite://{tmp_path / 'data' / 'endb.db'}"


@pytest.fixture
async def sqlite_adapter(sqlite_uri: str) -> AsyncGenerator[SqliteAdapter, None]:
    """Connected SQLite adapter in namespace "endb".

    Yields:
        SqliteAdapter ready for use
    """
    adapter = SqliteAdapter(EndbOptions(uri=sqlite_uri))
    await adapter.connect()

    yield adapter

    await adapter.close()
