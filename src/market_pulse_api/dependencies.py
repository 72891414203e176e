"""Request-scoped access to the objects created in the app lifespan."""

import json
import math
from typing import Any

from fastapi import Request
from pydantic import BaseModel

from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.service import PulseStore
from market_pulse.shared.errors import FieldViolation, ValidationError


def get_store(request: Request) -> PulseStore:
    return request.app.state.store


def get_db(request: Request) -> IDatabaseAdapter:
    return request.app.state.db


def _reject_constant(token: str) -> Any:
    raise ValidationError([FieldViolation("body", "valid JSON", token)])


def _parse_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValidationError([FieldViolation("body", "finite number", token)])
    return value


async def read_json(request: Request) -> Any:
    """Decoded request body.

    Malformed JSON, the NaN/Infinity extensions and number literals that
    overflow to infinity are validation failures on "body".
    """
    body = await request.body()
    try:
        return json.loads(body, parse_constant=_reject_constant, parse_float=_parse_float)
    except ValueError:
        raise ValidationError([FieldViolation("body", "valid JSON", None)]) from None


def dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")
