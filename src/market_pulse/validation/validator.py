"""
Validator for inbound records.

Validation is total and synchronous: a record is either fully accepted as a
typed model or rejected with every field violation listed. Out-of-bound
values are never clamped, and strings or booleans are never coerced to numbers.
"""

from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from market_pulse.infrastructure.observability import get_validation_logger
from market_pulse.shared.enums import MarketType, PulseKind
from market_pulse.shared.errors import FieldViolation, ValidationError
from market_pulse.storage.schemas.pulses import PULSE_SCHEMAS
from market_pulse.storage.schemas.relational import MarketCreate

log = get_validation_logger()

MARKET_CONSTRAINTS = {
    "name": "non-empty string",
    "symbol": "non-empty string",
    "type": "one of " + ", ".join(t.value for t in MarketType),
    "description": "string",
}


def _require_object(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValidationError([FieldViolation("body", "object", raw)])
    return raw


def to_violations(
    exc: PydanticValidationError,
    constraints: dict[str, str],
) -> list[FieldViolation]:
    """Flatten pydantic errors to one violation per top-level field."""
    violations: list[FieldViolation] = []
    seen: set[str] = set()
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        field = str(loc[0])
        if field in seen:
            continue
        seen.add(field)
        if error.get("type") == "missing":
            violations.append(FieldViolation(field, "required", None))
        else:
            violations.append(
                FieldViolation(field, constraints.get(field, error["msg"]), error.get("input"))
            )
    return violations


def validate_pulse(kind: PulseKind | str, raw: Any) -> BaseModel:
    """
    Validate a raw pulse payload against its kind's schema.

    Args:
        kind: Pulse kind (enum or its string value)
        raw: Decoded request body

    Returns:
        Instance of the kind's input model (snake_case attributes)

    Raises:
        ValidationError: With one FieldViolation per rejected field
    """
    try:
        schema = PULSE_SCHEMAS[PulseKind(kind)]
    except ValueError:
        allowed = ", ".join(k.value for k in PulseKind)
        raise ValidationError([FieldViolation("kind", f"one of {allowed}", kind)]) from None

    payload = _require_object(raw)
    constraints = {"marketId": "string"}
    constraints.update({spec.alias: spec.constraint for spec in schema.fields})

    try:
        return schema.input_model.model_validate(payload)
    except PydanticValidationError as e:
        violations = to_violations(e, constraints)
        log.info("pulse_rejected", kind=schema.kind.value, fields=[v.field for v in violations])
        raise ValidationError(violations) from None


def validate_market(raw: Any) -> MarketCreate:
    """Validate a raw market payload (name, symbol, type, description?)."""
    payload = _require_object(raw)
    try:
        return MarketCreate.model_validate(payload)
    except PydanticValidationError as e:
        violations = to_violations(e, MARKET_CONSTRAINTS)
        log.info("market_rejected", fields=[v.field for v in violations])
        raise ValidationError(violations) from None
