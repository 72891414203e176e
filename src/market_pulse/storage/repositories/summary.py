"""Market summary aggregator.

Counts pulse records per market for every pulse kind. The counts are derived
on every call and never persisted.
"""

from collections import defaultdict

from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.shared.enums import PulseKind
from market_pulse.storage.schemas.relational import Market, MarketWithCounts


def empty_counts() -> dict[str, int]:
    return {kind.count_key: 0 for kind in PulseKind}


class MarketSummaryAggregator:
    """Per-market, per-kind pulse counts for registry listings."""

    def __init__(self, db: IDatabaseAdapter):
        self.db = db

    async def count_by_market(self) -> dict[str, dict[str, int]]:
        """Return {market_id: {"sentimentPulses": n, ...}} for markets with pulses."""
        query = " UNION ALL ".join(
            f"SELECT market_id, '{kind.count_key}' AS count_key, COUNT(*) AS n "
            f"FROM {kind.table} GROUP BY market_id"
            for kind in PulseKind
        )
        rows = await self.db.fetch(query)

        counts: dict[str, dict[str, int]] = defaultdict(empty_counts)
        for row in rows:
            counts[row["market_id"]][row["count_key"]] = int(row["n"])
        return dict(counts)

    async def annotate(self, markets: list[Market]) -> list[MarketWithCounts]:
        """Attach counts to each market, zero-filled for kinds with no records."""
        counts = await self.count_by_market()
        return [
            MarketWithCounts(
                **market.model_dump(),
                counts=counts.get(market.id, empty_counts()),
            )
            for market in markets
        ]
