"""Configuration package for market_pulse."""

from .state import (
    ApiConfig,
    ConfigLoader,
    ConfigState,
    DatabaseConfig,
    LoggingConfig,
    get_config,
)

__all__ = [
    "ApiConfig",
    "ConfigLoader",
    "ConfigState",
    "DatabaseConfig",
    "LoggingConfig",
    "get_config",
]
