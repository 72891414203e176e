"""
Shared enumerations for the pulse store.
"""

import enum


class MarketType(str, enum.Enum):
    """Instrument classification of a registered market."""

    EQUITY = "EQUITY"
    BOND = "BOND"
    COMMODITY = "COMMODITY"
    CURRENCY = "CURRENCY"
    CRYPTO = "CRYPTO"
    ETF = "ETF"
    INDEX = "INDEX"
    FUTURES = "FUTURES"
    OPTIONS = "OPTIONS"


class PulseKind(str, enum.Enum):
    """Pulse record kinds. Each kind owns one table and one field schema."""

    SENTIMENT = "sentiment"
    VOLATILITY = "volatility"
    LIQUIDITY = "liquidity"
    MOMENTUM = "momentum"
    RISK = "risk"
    FLOW = "flow"

    @property
    def table(self) -> str:
        return f"{self.value}_pulses"

    @property
    def count_key(self) -> str:
        """Key used for this kind in a market's `_count` summary."""
        return f"{self.value}Pulses"
