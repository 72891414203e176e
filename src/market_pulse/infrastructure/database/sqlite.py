"""SQLite adapter backed by aiosqlite.

Used for local runs and tests. Positional `$n` placeholders are rewritten to
SQLite's numbered `?n` form; datetimes are stored as fixed-width ISO-8601 text
so that lexical order equals chronological order, and dict/list parameters are
stored as JSON text.
"""

import asyncio
import json
import os
import re
import sqlite3
from datetime import datetime
from typing import Any

import aiosqlite

from market_pulse.infrastructure.database.errors import (
    ForeignKeyViolationError,
    UniqueConstraintError,
)
from market_pulse.infrastructure.observability import get_database_logger
from market_pulse.shared.errors import StorageError

log = get_database_logger(backend="sqlite")

_PLACEHOLDER = re.compile(r"\$(\d+)")

MEMORY = ":memory:"


def translate_query(query: str) -> str:
    """Rewrite $1, $2 ... placeholders to ?1, ?2 ..."""
    return _PLACEHOLDER.sub(r"?\1", query)


def encode_param(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(timespec="microseconds")
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def path_from_url(url: str) -> str:
    """sqlite:///relative.db, sqlite:////abs/path.db, sqlite:///:memory:"""
    if not url.startswith("sqlite://"):
        raise ValueError(f"Not a sqlite URL: {url}")
    path = url[len("sqlite://"):]
    if path.startswith("/"):
        path = path[1:]
    return path or MEMORY


class SQLiteAdapter:
    """
    aiosqlite implementation of IDatabaseAdapter.

    Holds one connection for the adapter lifetime. Foreign keys are enforced
    per connection, so the pragma is set on connect. Statements are serialized
    by a lock so each write commits atomically.
    """

    backend = "sqlite"

    def __init__(self, path: str = MEMORY, command_timeout: float = 10.0):
        self.path = path
        self.command_timeout = command_timeout
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_url(cls, url: str, command_timeout: float = 10.0) -> "SQLiteAdapter":
        return cls(path_from_url(url), command_timeout=command_timeout)

    async def connect(self) -> None:
        if self._conn is not None:
            return
        if self.path != MEMORY:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        try:
            self._conn = await aiosqlite.connect(self.path)
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA foreign_keys = ON")
            if self.path != MEMORY:
                await self._conn.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as e:
            log.error("connect_failed", path=self.path, error=str(e))
            raise StorageError("Database unreachable") from e
        log.info("connected", path=self.path)

    async def disconnect(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        log.info("disconnected", path=self.path)

    async def _run(self, query: str, args: tuple, fetch: str | None) -> Any:
        if self._conn is None:
            raise StorageError("Database not connected")

        sql = translate_query(query)
        params = tuple(encode_param(a) for a in args)

        async def op() -> Any:
            async with self._lock:
                try:
                    cursor = await self._conn.execute(sql, params)
                except sqlite3.IntegrityError:
                    await self._conn.rollback()
                    raise
                try:
                    if fetch == "all":
                        return await cursor.fetchall()
                    if fetch == "one":
                        return await cursor.fetchone()
                    await self._conn.commit()
                    return None
                finally:
                    await cursor.close()

        try:
            return await asyncio.wait_for(op(), timeout=self.command_timeout)
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "UNIQUE" in message:
                raise UniqueConstraintError(message) from e
            if "FOREIGN KEY" in message:
                raise ForeignKeyViolationError(message) from e
            log.error("query_failed", error=message)
            raise StorageError("Database call failed") from e
        except asyncio.TimeoutError as e:
            log.error("query_timeout", timeout=self.command_timeout)
            raise StorageError("Database call timed out") from e
        except sqlite3.Error as e:
            log.error("query_failed", error=str(e))
            raise StorageError("Database call failed") from e

    async def execute(self, query: str, *args: Any) -> None:
        await self._run(query, args, None)

    async def fetch(self, query: str, *args: Any) -> list[dict[str, Any]]:
        rows = await self._run(query, args, "all")
        return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *args: Any) -> dict[str, Any] | None:
        row = await self._run(query, args, "one")
        return dict(row) if row else None

    async def fetchval(self, query: str, *args: Any) -> Any:
        row = await self._run(query, args, "one")
        return row[0] if row else None

    async def ping(self) -> bool:
        try:
            return await self.fetchval("SELECT 1") == 1
        except StorageError:
            return False
