"""
Pulse store exception hierarchy.

Validation and referential errors are raised before any write and carry
caller-facing detail. StorageError wraps durable-layer faults; its message is
logged server-side and never returned to callers.
"""

import math
from dataclasses import dataclass
from typing import Any


def _json_safe(value: Any) -> Any:
    """NaN and infinities have no JSON form; report them as their string."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


@dataclass(frozen=True)
class FieldViolation:
    """A single rejected field: where, what was expected, what was received."""

    field: str
    constraint: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "constraint": self.constraint,
            "value": _json_safe(self.value),
        }


class PulseStoreError(Exception):
    """Base exception for all pulse store errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PulseStoreError):
    """400 - Inbound record failed schema validation."""

    status_code = 400

    def __init__(self, violations: list[FieldViolation], message: str = "Validation failed"):
        super().__init__(message)
        self.violations = list(violations)

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]


class NotFoundError(PulseStoreError):
    """404 - Referenced entity does not exist."""

    status_code = 404

    def __init__(self, message: str, entity: str | None = None, key: str | None = None):
        super().__init__(message)
        self.entity = entity
        self.key = key


class ConflictError(PulseStoreError):
    """409 - Unique key already taken."""

    status_code = 409

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class StorageError(PulseStoreError):
    """500 - Durable layer unreachable, timed out, or failed unexpectedly."""

    status_code = 500
