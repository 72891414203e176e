"""Shared errors and enumerations."""

from .enums import MarketType, PulseKind
from .errors import (
    ConflictError,
    FieldViolation,
    NotFoundError,
    PulseStoreError,
    StorageError,
    ValidationError,
)

__all__ = [
    "MarketType",
    "PulseKind",
    "PulseStoreError",
    "ValidationError",
    "FieldViolation",
    "NotFoundError",
    "ConflictError",
    "StorageError",
]
