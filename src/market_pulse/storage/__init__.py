"""Storage layer for the pulse store.

    ┌─────────────────────────────────────┐
    │ PulseStore service / HTTP API       │
    └──────────────┬──────────────────────┘
                   │
    ┌──────────────▼──────────────────────┐
    │ Storage Layer (THIS MODULE)         │
    │  Repositories:                      │
    │  - MarketRepository                 │
    │  - PulseRepository (per kind)       │
    │  - MarketSummaryAggregator          │
    │  Schemas:                           │
    │  - Market, MarketSummary            │
    │  - PulseSchema table (six kinds)    │
    └──────────────┬──────────────────────┘
                   │
    ┌──────────────▼──────────────────────┐
    │ Infrastructure Layer                │
    │ - PostgreSQL (asyncpg)              │
    │ - SQLite (aiosqlite)                │
    └─────────────────────────────────────┘
"""

from .ddl import create_tables
from .repositories import MarketRepository, MarketSummaryAggregator, PulseRepository
from .schemas import (
    PULSE_SCHEMAS,
    Market,
    MarketCreate,
    MarketSummary,
    MarketWithCounts,
    PulseSchema,
    get_schema,
)

__all__ = [
    "create_tables",
    # Repositories
    "MarketRepository",
    "PulseRepository",
    "MarketSummaryAggregator",
    # Schemas
    "PULSE_SCHEMAS",
    "PulseSchema",
    "get_schema",
    "Market",
    "MarketCreate",
    "MarketSummary",
    "MarketWithCounts",
]
