"""Relational models for the market registry.

- Market: A registered tradable instrument
- MarketCreate: Inbound payload for registering a market
- MarketSummary: The {name, symbol} projection joined onto pulse records
- MarketWithCounts: Market plus per-kind pulse counts for registry listings

Stored in: markets (relational table, UNIQUE(symbol))
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from market_pulse.shared.enums import MarketType


class MarketCreate(BaseModel):
    """Inbound market payload. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr = Field(..., min_length=1, description="Display name (e.g., 'Apple')")
    symbol: StrictStr = Field(..., min_length=1, description="Unique ticker (e.g., 'AAPL')")
    market_type: MarketType = Field(..., alias="type", description="Instrument class")
    description: StrictStr | None = Field(None, description="Free-text description")


class Market(BaseModel):
    """Registered market.

    Created via the registry and never mutated afterwards. Referenced, never
    owned, by pulse records.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Server-generated identifier")
    name: str
    symbol: str
    market_type: MarketType = Field(..., alias="type")
    description: str | None = None
    created_at: datetime | None = Field(None, alias="createdAt")

    def to_summary(self) -> "MarketSummary":
        return MarketSummary(name=self.name, symbol=self.symbol)


class MarketSummary(BaseModel):
    """Minimal market projection joined onto every pulse record."""

    name: str
    symbol: str


class MarketWithCounts(Market):
    """Registry listing entry: market plus derived pulse counts per kind."""

    counts: dict[str, int] = Field(default_factory=dict, alias="_count")
