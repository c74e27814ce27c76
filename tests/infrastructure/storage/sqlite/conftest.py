"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from batchstock.infrastructure.storage.sqlite import ConnectionPool, SQLiteDocumentStore


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def pool(temp_db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over a temporary database."""
    pool = ConnectionPool(temp_db_path, pool_size=2, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def sqlite_store(pool: ConnectionPool) -> SQLiteDocumentStore:
    return SQLiteDocumentStore(pool)
