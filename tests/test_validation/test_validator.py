"""
Tests for schema-driven validation of pulse and market payloads.

Every bounded field of every kind is exercised at both closed ends and just
outside them, so a new FieldSpec is covered as soon as it is added.
"""

import json

import pytest

from market_pulse.shared.enums import MarketType, PulseKind
from market_pulse.shared.errors import ValidationError
from market_pulse.storage.schemas.pulses import PULSE_SCHEMAS
from market_pulse.validation import validate_market, validate_pulse
from tests.fixtures.pulses import pulse_payload

# ============================================================================
# BOUNDS
# ============================================================================


def _bounded_fields():
    for kind, schema in PULSE_SCHEMAS.items():
        for spec in schema.numeric_fields:
            if spec.ge is not None or spec.le is not None:
                yield pytest.param(kind, spec, id=f"{kind.value}.{spec.alias}")


BOUNDED = list(_bounded_fields())


@pytest.mark.parametrize("kind,spec", BOUNDED)
def test_bounds_are_inclusive(kind, spec):
    for edge in (spec.ge, spec.le):
        if edge is None:
            continue
        record = validate_pulse(kind, pulse_payload(kind, "m1", **{spec.alias: edge}))
        assert getattr(record, spec.name) == edge


@pytest.mark.parametrize("kind,spec", BOUNDED)
def test_out_of_bounds_rejected_naming_field(kind, spec):
    outside = []
    if spec.ge is not None:
        outside.append(spec.ge - 0.001)
    if spec.le is not None:
        outside.append(spec.le + 0.001)

    for value in outside:
        with pytest.raises(ValidationError) as exc_info:
            validate_pulse(kind, pulse_payload(kind, "m1", **{spec.alias: value}))
        assert exc_info.value.fields == [spec.alias]
        violation = exc_info.value.violations[0]
        assert violation.value == value
        assert violation.constraint == spec.constraint


def test_sentiment_fear_greed_150_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("sentiment", pulse_payload(PulseKind.SENTIMENT, "m1", fearGreed=150))

    violation = exc_info.value.violations[0]
    assert violation.field == "fearGreed"
    assert violation.constraint == "number in [0, 100]"
    assert violation.value == 150


def test_unbounded_fields_accept_any_finite_number():
    record = validate_pulse(
        PulseKind.LIQUIDITY,
        pulse_payload(PulseKind.LIQUIDITY, "m1", etfFlow=-9.5e12, netFlow=7.25e11),
    )
    assert record.etf_flow == -9.5e12
    assert record.net_flow == 7.25e11


def test_non_negative_fields_have_no_upper_bound():
    record = validate_pulse(
        PulseKind.RISK, pulse_payload(PulseKind.RISK, "m1", leverage=1_000_000)
    )
    assert record.leverage == 1_000_000


# ============================================================================
# TYPE DISCIPLINE
# ============================================================================


@pytest.mark.parametrize("value", ["42", True, None, [1], float("nan"), float("inf")])
def test_numeric_fields_are_not_coerced(value):
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("sentiment", pulse_payload(PulseKind.SENTIMENT, "m1", sps=value))
    assert exc_info.value.fields == ["sps"]


@pytest.mark.parametrize("value,rendered", [(float("nan"), "nan"), (float("-inf"), "-inf")])
def test_non_finite_rejections_serialize_as_strict_json(value, rendered):
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("risk", pulse_payload(PulseKind.RISK, "m1", leverage=value))

    details = [v.to_dict() for v in exc_info.value.violations]
    assert details == [{"field": "leverage", "constraint": "number >= 0", "value": rendered}]
    json.dumps(details, allow_nan=False)


def test_integers_accepted_as_numbers():
    record = validate_pulse("momentum", pulse_payload(PulseKind.MOMENTUM, "m1", trendDirection=-1))
    assert record.trend_direction == -1.0
    assert isinstance(record.trend_direction, float)


def test_missing_fields_reported_as_required():
    payload = pulse_payload(PulseKind.FLOW, "m1")
    del payload["fds"]
    del payload["marketId"]

    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("flow", payload)

    by_field = {v.field: v for v in exc_info.value.violations}
    assert set(by_field) == {"fds", "marketId"}
    assert by_field["fds"].constraint == "required"


def test_market_id_must_be_string():
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("flow", pulse_payload(PulseKind.FLOW, 123))
    assert exc_info.value.fields == ["marketId"]


def test_one_bad_field_fails_whole_record_and_all_are_listed():
    payload = pulse_payload(PulseKind.RISK, "m1", rtm=101, fundingStress=-1)
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("risk", payload)
    assert sorted(exc_info.value.fields) == ["fundingStress", "rtm"]


# ============================================================================
# ANNOTATIONS AND SHAPE
# ============================================================================


def test_annotation_payload_passes_through_untouched():
    sources = {"news": ["reuters", "bloomberg"], "weights": {"news": 0.4}, "n": 12}
    record = validate_pulse(
        "sentiment", pulse_payload(PulseKind.SENTIMENT, "m1", sources=sources)
    )
    assert record.sources == sources


def test_annotation_is_optional():
    record = validate_pulse("momentum", pulse_payload(PulseKind.MOMENTUM, "m1"))
    assert record.mtf_data is None


def test_annotation_must_be_object():
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("risk", pulse_payload(PulseKind.RISK, "m1", riskFactors=[1, 2]))
    assert exc_info.value.fields == ["riskFactors"]
    assert exc_info.value.violations[0].constraint == "object"


def test_unknown_keys_are_ignored():
    record = validate_pulse(
        "flow", pulse_payload(PulseKind.FLOW, "m1", id="client-id", timestamp="x")
    )
    assert record.market_id == "m1"
    assert not hasattr(record, "timestamp")


def test_field_names_are_not_accepted_in_place_of_wire_keys():
    payload = pulse_payload(PulseKind.SENTIMENT, "m1")
    payload["fear_greed"] = payload.pop("fearGreed")
    payload["market_id"] = payload.pop("marketId")

    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("sentiment", payload)

    assert sorted(exc_info.value.fields) == ["fearGreed", "marketId"]
    assert {v.constraint for v in exc_info.value.violations} == {"required"}


def test_unknown_kind_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("correlation", {"marketId": "m1"})
    assert exc_info.value.fields == ["kind"]


@pytest.mark.parametrize("body", [None, [], "text", 3])
def test_body_must_be_object(body):
    with pytest.raises(ValidationError) as exc_info:
        validate_pulse("sentiment", body)
    assert exc_info.value.fields == ["body"]


# ============================================================================
# MARKETS
# ============================================================================


def test_valid_market():
    market = validate_market(
        {"name": "Apple", "symbol": "AAPL", "type": "EQUITY", "description": "Apple Inc."}
    )
    assert market.market_type is MarketType.EQUITY
    assert market.description == "Apple Inc."


def test_market_description_optional():
    market = validate_market({"name": "Bitcoin", "symbol": "BTC", "type": "CRYPTO"})
    assert market.description is None


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"name": "", "symbol": "AAPL", "type": "EQUITY"}, "name"),
        ({"name": "Apple", "symbol": "", "type": "EQUITY"}, "symbol"),
        ({"name": "Apple", "symbol": "AAPL", "type": "STOCK"}, "type"),
        ({"name": "Apple", "symbol": "AAPL"}, "type"),
        ({"name": "Apple", "symbol": "AAPL", "market_type": "EQUITY"}, "type"),
        ({"name": "Apple", "symbol": 5, "type": "EQUITY"}, "symbol"),
    ],
)
def test_invalid_market(payload, field):
    with pytest.raises(ValidationError) as exc_info:
        validate_market(payload)
    assert exc_info.value.fields == [field]
