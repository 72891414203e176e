"""PostgreSQL adapter backed by an asyncpg connection pool."""

import asyncio
import json
from typing import Any

import asyncpg

from market_pulse.infrastructure.database.errors import (
    ForeignKeyViolationError,
    UniqueConstraintError,
)
from market_pulse.infrastructure.observability import get_database_logger
from market_pulse.shared.errors import StorageError

log = get_database_logger(backend="postgresql")


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode/encode JSONB columns as Python objects."""
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


class PostgresAdapter:
    """
    asyncpg implementation of IDatabaseAdapter.

    Each call acquires a pooled connection for its duration. Every call is
    bounded by `command_timeout` seconds.
    """

    backend = "postgresql"

    def __init__(self, dsn: str, pool_size: int = 10, command_timeout: float = 10.0):
        self.dsn = dsn
        self.pool_size = pool_size
        self.command_timeout = command_timeout
        self.pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        if self.pool is not None:
            return
        try:
            self.pool = await asyncio.wait_for(
                asyncpg.create_pool(
                    self.dsn,
                    min_size=1,
                    max_size=self.pool_size,
                    command_timeout=self.command_timeout,
                    init=_init_connection,
                ),
                timeout=self.command_timeout,
            )
        except (asyncio.TimeoutError, OSError, asyncpg.PostgresError) as e:
            log.error("pool_create_failed", error=str(e))
            raise StorageError("Database unreachable") from e
        log.info("pool_created", size=self.pool_size)

    async def disconnect(self) -> None:
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None
        log.info("pool_closed")

    async def _run(self, method: str, query: str, *args: Any) -> Any:
        if self.pool is None:
            raise StorageError("Database not connected")

        try:
            async with self.pool.acquire(timeout=self.command_timeout) as conn:
                return await asyncio.wait_for(
                    getattr(conn, method)(query, *args),
                    timeout=self.command_timeout,
                )
        except asyncpg.exceptions.UniqueViolationError as e:
            raise UniqueConstraintError(
                str(e), constraint=getattr(e, "constraint_name", None)
            ) from e
        except asyncpg.exceptions.ForeignKeyViolationError as e:
            raise ForeignKeyViolationError(
                str(e), constraint=getattr(e, "constraint_name", None)
            ) from e
        except asyncio.TimeoutError as e:
            log.error("query_timeout", timeout=self.command_timeout)
            raise StorageError("Database call timed out") from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            log.error("query_failed", error=str(e))
            raise StorageError("Database call failed") from e

    async def execute(self, query: str, *args: Any) -> None:
        await self._run("execute", query, *args)

    async def fetch(self, query: str, *args: Any) -> list[dict[str, Any]]:
        rows = await self._run("fetch", query, *args)
        return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *args: Any) -> dict[str, Any] | None:
        row = await self._run("fetchrow", query, *args)
        return dict(row) if row else None

    async def fetchval(self, query: str, *args: Any) -> Any:
        return await self._run("fetchval", query, *args)

    async def ping(self) -> bool:
        try:
            return await self.fetchval("SELECT 1") == 1
        except StorageError:
            return False
