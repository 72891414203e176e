"""
Constraint violations reported by database adapters.

Adapters translate driver-specific exceptions into these types so that
repositories can map them to domain errors without importing a driver.
Every other driver fault is raised as market_pulse.shared.errors.StorageError.
"""


class ConstraintViolation(Exception):
    """A write was rejected by a storage-level constraint."""

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.constraint = constraint


class UniqueConstraintError(ConstraintViolation):
    """UNIQUE / PRIMARY KEY constraint rejected the write."""


class ForeignKeyViolationError(ConstraintViolation):
    """FOREIGN KEY constraint rejected the write."""
