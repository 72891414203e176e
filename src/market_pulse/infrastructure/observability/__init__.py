"""
Observability for the pulse store: structured logging with layer and
component context on every entry.
"""

from .logging import (
    get_api_logger,
    get_database_logger,
    get_infrastructure_logger,
    get_logger,
    get_storage_logger,
    get_validation_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_infrastructure_logger",
    "get_storage_logger",
    "get_validation_logger",
    "get_api_logger",
    "get_database_logger",
]
