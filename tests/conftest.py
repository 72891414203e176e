"""
Shared fixtures: an in-memory SQLite store with a deterministic clock.
"""

import pytest
import pytest_asyncio

from market_pulse.infrastructure.database import SQLiteAdapter
from market_pulse.service import PulseStore
from market_pulse.storage import create_tables
from tests.fixtures.pulses import StepClock


@pytest.fixture
def clock():
    return StepClock()


@pytest_asyncio.fixture
async def db():
    adapter = SQLiteAdapter(":memory:")
    await adapter.connect()
    await create_tables(adapter)
    yield adapter
    await adapter.disconnect()


@pytest_asyncio.fixture
async def store(db, clock):
    return PulseStore(db, clock=clock)


@pytest_asyncio.fixture
async def apple(store):
    return await store.create_market({"name": "Apple", "symbol": "AAPL", "type": "EQUITY"})
