"""Pulse repository, one instance per pulse kind.

SQL is generated from the kind's PulseSchema, so all six kinds share the
same insert and query shapes. Every read joins the market's name and symbol.

Ordering:
  - newest first: timestamp DESC, id DESC
  - history (oldest first): timestamp ASC, id ASC
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from market_pulse.infrastructure.database.errors import ForeignKeyViolationError
from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.infrastructure.observability import get_storage_logger
from market_pulse.shared.errors import NotFoundError
from market_pulse.storage.schemas.pulses import PulseRecordBase, PulseSchema
from market_pulse.storage.schemas.relational import MarketSummary


class PulseRepository:
    """Repository for the records of one pulse kind."""

    def __init__(self, db: IDatabaseAdapter, schema: PulseSchema):
        self.db = db
        self.schema = schema
        self.log = get_storage_logger("pulse-repository", kind=schema.kind.value)

    @property
    def _select(self) -> str:
        columns = ", ".join(f"p.{c}" for c in self.schema.columns)
        return f"""
            SELECT p.id, p.market_id, p.timestamp, {columns},
                   m.name AS market_name, m.symbol AS market_symbol
            FROM {self.schema.table} p
            JOIN markets m ON m.id = p.market_id
        """

    def _to_record(self, row: dict[str, Any]) -> PulseRecordBase:
        data = {column: row[column] for column in self.schema.columns}
        return self.schema.record_model(
            id=row["id"],
            market_id=row["market_id"],
            timestamp=row["timestamp"],
            market=MarketSummary(name=row["market_name"], symbol=row["market_symbol"]),
            **data,
        )

    async def insert(
        self,
        pulse_id: str,
        timestamp: datetime,
        data: BaseModel,
        market: MarketSummary,
    ) -> PulseRecordBase:
        """Insert a validated record and return it joined with `market`.

        Raises:
            NotFoundError: If the FOREIGN KEY on market_id rejects the row
        """
        columns = ["id", "market_id", "timestamp", *self.schema.columns]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        values = [getattr(data, c) for c in self.schema.columns]
        query = f"""
            INSERT INTO {self.schema.table} ({', '.join(columns)})
            VALUES ({placeholders})
        """

        try:
            await self.db.execute(query, pulse_id, data.market_id, timestamp, *values)
        except ForeignKeyViolationError as e:
            raise NotFoundError(
                f"Market '{data.market_id}' not found",
                entity="market",
                key=data.market_id,
            ) from e

        self.log.info("pulse_inserted", pulse_id=pulse_id, market_id=data.market_id)
        return self.schema.record_model(
            id=pulse_id,
            market_id=data.market_id,
            timestamp=timestamp,
            market=market,
            **{c: getattr(data, c) for c in self.schema.columns},
        )

    async def find_latest(
        self,
        market_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PulseRecordBase]:
        """Newest-first page, optionally restricted to one market."""
        args: list[Any] = []
        where = ""
        if market_id is not None:
            args.append(market_id)
            where = "WHERE p.market_id = $1"
        args.extend([limit, offset])
        n = len(args)
        query = f"""
            {self._select}
            {where}
            ORDER BY p.timestamp DESC, p.id DESC
            LIMIT ${n - 1} OFFSET ${n}
        """

        rows = await self.db.fetch(query, *args)
        self.log.debug("pulses_listed", market_id=market_id, count=len(rows))
        return [self._to_record(row) for row in rows]

    async def find_range(
        self,
        market_id: str,
        start: datetime,
        end: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PulseRecordBase]:
        """Oldest-first page of one market's records with timestamp in [start, end]."""
        args: list[Any] = [market_id, start]
        conditions = ["p.market_id = $1", "p.timestamp >= $2"]
        if end is not None:
            args.append(end)
            conditions.append(f"p.timestamp <= ${len(args)}")
        args.extend([limit, offset])
        n = len(args)
        query = f"""
            {self._select}
            WHERE {' AND '.join(conditions)}
            ORDER BY p.timestamp ASC, p.id ASC
            LIMIT ${n - 1} OFFSET ${n}
        """

        rows = await self.db.fetch(query, *args)
        return [self._to_record(row) for row in rows]

    async def find_newest(self, market_id: str) -> PulseRecordBase | None:
        records = await self.find_latest(market_id, limit=1, offset=0)
        return records[0] if records else None

    async def count(self, market_id: str | None = None) -> int:
        if market_id is None:
            result = await self.db.fetchval(f"SELECT COUNT(*) FROM {self.schema.table}")
        else:
            result = await self.db.fetchval(
                f"SELECT COUNT(*) FROM {self.schema.table} WHERE market_id = $1",
                market_id,
            )
        return int(result or 0)
