"""
Database adapters.

Exports the adapter protocol, the two concrete adapters, and a factory that
picks one from DatabaseConfig.url.
"""

from market_pulse.config.state import DatabaseConfig

from .errors import ConstraintViolation, ForeignKeyViolationError, UniqueConstraintError
from .ports import IDatabaseAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter


def create_adapter(config: DatabaseConfig) -> IDatabaseAdapter:
    """Build an unconnected adapter for the configured backend."""
    if config.backend == "sqlite":
        return SQLiteAdapter.from_url(config.url, command_timeout=config.command_timeout)
    return PostgresAdapter(
        config.url,
        pool_size=config.pool_size,
        command_timeout=config.command_timeout,
    )


__all__ = [
    "IDatabaseAdapter",
    "PostgresAdapter",
    "SQLiteAdapter",
    "ConstraintViolation",
    "UniqueConstraintError",
    "ForeignKeyViolationError",
    "create_adapter",
]
