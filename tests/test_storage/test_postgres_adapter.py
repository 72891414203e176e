"""
Tests for the asyncpg adapter using a mocked connection pool.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from market_pulse.infrastructure.database import (
    ForeignKeyViolationError,
    PostgresAdapter,
    UniqueConstraintError,
)
from market_pulse.shared.errors import StorageError

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_conn():
    """Mock asyncpg connection"""
    conn = MagicMock()
    conn.execute = AsyncMock(return_value="INSERT 0 1")
    conn.fetch = AsyncMock(return_value=[{"id": "m1", "name": "Apple"}])
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetchval = AsyncMock(return_value=1)
    return conn


@pytest.fixture
def adapter(mock_conn):
    """Adapter with a mocked pool whose acquire() yields mock_conn"""
    acquired = MagicMock()
    acquired.__aenter__ = AsyncMock(return_value=mock_conn)
    acquired.__aexit__ = AsyncMock(return_value=False)

    pool = MagicMock()
    pool.acquire = MagicMock(return_value=acquired)
    pool.close = AsyncMock()

    db = PostgresAdapter("postgresql://localhost/pulse", command_timeout=0.5)
    db.pool = pool
    return db


# ============================================================================
# TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_fetch_returns_dicts(adapter, mock_conn):
    rows = await adapter.fetch("SELECT * FROM markets WHERE id = $1", "m1")

    assert rows == [{"id": "m1", "name": "Apple"}]
    mock_conn.fetch.assert_awaited_once_with("SELECT * FROM markets WHERE id = $1", "m1")
    adapter.pool.acquire.assert_called_once_with(timeout=0.5)


@pytest.mark.asyncio
async def test_fetchrow_none(adapter):
    assert await adapter.fetchrow("SELECT 1 WHERE false") is None


@pytest.mark.asyncio
async def test_ping(adapter):
    assert await adapter.ping() is True


@pytest.mark.asyncio
async def test_unique_violation_mapped(adapter, mock_conn):
    mock_conn.execute.side_effect = asyncpg.exceptions.UniqueViolationError("duplicate key")

    with pytest.raises(UniqueConstraintError):
        await adapter.execute("INSERT INTO markets VALUES ($1)", "m1")


@pytest.mark.asyncio
async def test_foreign_key_violation_mapped(adapter, mock_conn):
    mock_conn.execute.side_effect = asyncpg.exceptions.ForeignKeyViolationError(
        "violates foreign key"
    )

    with pytest.raises(ForeignKeyViolationError):
        await adapter.execute("INSERT INTO flow_pulses VALUES ($1)", "p1")


@pytest.mark.asyncio
async def test_driver_fault_becomes_storage_error(adapter, mock_conn):
    mock_conn.fetch.side_effect = ConnectionResetError("connection reset")

    with pytest.raises(StorageError) as exc_info:
        await adapter.fetch("SELECT 1")
    assert "reset" not in exc_info.value.message


@pytest.mark.asyncio
async def test_slow_call_times_out(adapter, mock_conn):
    async def slow(*args):
        await asyncio.sleep(5)

    mock_conn.fetchval.side_effect = slow

    with pytest.raises(StorageError, match="timed out"):
        await adapter.fetchval("SELECT pg_sleep(5)")
    assert await adapter.ping() is False


@pytest.mark.asyncio
async def test_not_connected():
    db = PostgresAdapter("postgresql://localhost/pulse")
    with pytest.raises(StorageError):
        await db.execute("SELECT 1")


@pytest.mark.asyncio
async def test_disconnect_closes_pool(adapter):
    pool = adapter.pool
    await adapter.disconnect()

    pool.close.assert_awaited_once()
    assert adapter.pool is None
