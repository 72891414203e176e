"""Market repository for the registry table.

Provides create and lookup operations for markets. Symbol uniqueness is
enforced by the UNIQUE constraint on markets.symbol, so concurrent writers
cannot register the same symbol twice.
"""

from datetime import datetime
from typing import Any

from market_pulse.infrastructure.database.errors import UniqueConstraintError
from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.infrastructure.observability import get_storage_logger
from market_pulse.shared.errors import ConflictError
from market_pulse.storage.schemas.relational import Market, MarketCreate

log = get_storage_logger("market-repository")

MARKET_COLUMNS = "id, name, symbol, market_type, description, created_at"


def row_to_market(row: dict[str, Any]) -> Market:
    return Market(
        id=row["id"],
        name=row["name"],
        symbol=row["symbol"],
        market_type=row["market_type"],
        description=row["description"],
        created_at=row["created_at"],
    )


class MarketRepository:
    """Repository for registered markets."""

    def __init__(self, db: IDatabaseAdapter):
        self.db = db

    async def create(self, market_id: str, data: MarketCreate, created_at: datetime) -> Market:
        """Insert a new market.

        Raises:
            ConflictError: If the symbol is already registered
        """
        query = f"""
            INSERT INTO markets ({MARKET_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6)
        """
        try:
            await self.db.execute(
                query,
                market_id,
                data.name,
                data.symbol,
                data.market_type.value,
                data.description,
                created_at,
            )
        except UniqueConstraintError as e:
            log.info("market_symbol_conflict", symbol=data.symbol)
            raise ConflictError(
                f"Market with symbol '{data.symbol}' already exists",
                field="symbol",
                value=data.symbol,
            ) from e

        log.info("market_created", market_id=market_id, symbol=data.symbol)
        return Market(
            id=market_id,
            name=data.name,
            symbol=data.symbol,
            market_type=data.market_type,
            description=data.description,
            created_at=created_at,
        )

    async def find_by_id(self, market_id: str) -> Market | None:
        row = await self.db.fetchrow(
            f"SELECT {MARKET_COLUMNS} FROM markets WHERE id = $1", market_id
        )
        return row_to_market(row) if row else None

    async def find_all(self) -> list[Market]:
        """All markets ordered by name ascending (id breaks ties)."""
        rows = await self.db.fetch(
            f"SELECT {MARKET_COLUMNS} FROM markets ORDER BY name ASC, id ASC"
        )
        return [row_to_market(row) for row in rows]
