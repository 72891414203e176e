"""Schema-driven validation of inbound market and pulse records."""

from .validator import validate_market, validate_pulse

__all__ = ["validate_market", "validate_pulse"]
