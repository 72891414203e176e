"""Storage schemas for the market registry and the pulse schema set.

All models use Pydantic for strict validation. Pulse models are generated
from the per-kind field tables in `pulses.py`.
"""

from .pulses import (
    PULSE_SCHEMAS,
    FieldSpec,
    PulseRecordBase,
    PulseSchema,
    get_schema,
)
from .relational import Market, MarketCreate, MarketSummary, MarketWithCounts

__all__ = [
    # Pulses
    "FieldSpec",
    "PulseSchema",
    "PulseRecordBase",
    "PULSE_SCHEMAS",
    "get_schema",
    # Relational
    "Market",
    "MarketCreate",
    "MarketSummary",
    "MarketWithCounts",
]
