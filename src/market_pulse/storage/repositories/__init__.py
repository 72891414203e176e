"""Repository module for data access layer.

- MarketRepository: the market registry table
- PulseRepository: records of one pulse kind (generic over PulseSchema)
- MarketSummaryAggregator: derived per-market pulse counts
"""

from .markets import MarketRepository
from .pulses import PulseRepository
from .summary import MarketSummaryAggregator

__all__ = [
    "MarketRepository",
    "PulseRepository",
    "MarketSummaryAggregator",
]
