"""
Tests for the pulse schema table and the generated DDL.
"""

import pytest

from market_pulse.shared.enums import PulseKind
from market_pulse.storage import get_schema
from market_pulse.storage.ddl import markets_ddl, pulse_ddl
from market_pulse.storage.schemas import PULSE_SCHEMAS


def test_every_kind_has_a_schema_led_by_its_composite():
    assert set(PULSE_SCHEMAS) == set(PulseKind)
    for kind, schema in PULSE_SCHEMAS.items():
        assert schema.kind is kind
        assert schema.fields[0].name == schema.composite
        assert schema.table == f"{kind.value}_pulses"


def test_get_schema_by_value():
    schema = get_schema("momentum")
    assert schema.composite == "mpm"
    assert schema.by_alias["trendDirection"].ge == -1
    assert [f.alias for f in schema.annotation_fields] == ["mtfData"]

    with pytest.raises(ValueError):
        get_schema("correlation")


def test_annotation_fields_per_kind():
    annotations = {
        kind: [f.alias for f in schema.annotation_fields]
        for kind, schema in PULSE_SCHEMAS.items()
    }
    assert annotations == {
        PulseKind.SENTIMENT: ["sources"],
        PulseKind.VOLATILITY: ["forecast5m", "forecast15m", "forecast30m"],
        PulseKind.LIQUIDITY: [],
        PulseKind.MOMENTUM: ["mtfData"],
        PulseKind.RISK: ["riskFactors"],
        PulseKind.FLOW: [],
    }


def test_constraint_descriptions():
    risk = get_schema(PulseKind.RISK)
    assert risk.by_alias["rtm"].constraint == "number in [0, 100]"
    assert risk.by_alias["leverage"].constraint == "number >= 0"
    assert risk.by_alias["riskFactors"].constraint == "object"
    assert get_schema(PulseKind.LIQUIDITY).by_alias["etfFlow"].constraint == "number"


@pytest.mark.parametrize("backend,json_type", [("postgresql", "JSONB"), ("sqlite", "TEXT")])
def test_pulse_ddl(backend, json_type):
    create_table, create_index = pulse_ddl(get_schema(PulseKind.SENTIMENT), backend)

    assert "CREATE TABLE IF NOT EXISTS sentiment_pulses" in create_table
    assert "market_id TEXT NOT NULL REFERENCES markets(id)" in create_table
    assert f"sources {json_type}" in create_table
    assert "(market_id, timestamp DESC)" in create_index


def test_markets_ddl_unique_symbol():
    create_table, _ = markets_ddl("postgresql")
    assert "symbol TEXT NOT NULL UNIQUE" in create_table
    assert "created_at TIMESTAMPTZ" in create_table
