"""API routers: market registry, per-kind pulses, history."""

from .history import router as history_router
from .markets import router as markets_router
from .pulses import build_pulse_router

__all__ = ["history_router", "markets_router", "build_pulse_router"]
