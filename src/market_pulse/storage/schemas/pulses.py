"""Pulse schema set.

One table of field specifications per pulse kind drives everything else:
input validation models, stored record models, SQL column lists and the
table DDL. Adding a field to a kind means adding one FieldSpec here.

Each FieldSpec is one of:
- bounded: closed interval [ge, le] (either side may be open-ended)
- unbounded: any finite number
- annotation: optional opaque JSON object, passed through untouched
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, create_model

from market_pulse.shared.enums import PulseKind
from market_pulse.storage.schemas.relational import MarketSummary


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


@dataclass(frozen=True)
class FieldSpec:
    """Column name, wire alias and acceptance rule of one pulse field."""

    name: str
    alias: str
    ge: float | None = None
    le: float | None = None
    annotation: bool = False

    @property
    def constraint(self) -> str:
        if self.annotation:
            return "object"
        if self.ge is not None and self.le is not None:
            return f"number in [{_fmt(self.ge)}, {_fmt(self.le)}]"
        if self.ge is not None:
            return f"number >= {_fmt(self.ge)}"
        if self.le is not None:
            return f"number <= {_fmt(self.le)}"
        return "number"


def bounded(name: str, alias: str, ge: float | None, le: float | None = None) -> FieldSpec:
    return FieldSpec(name, alias, ge=ge, le=le)


def unbounded(name: str, alias: str) -> FieldSpec:
    return FieldSpec(name, alias)


def annotation(name: str, alias: str) -> FieldSpec:
    return FieldSpec(name, alias, annotation=True)


def _decode_json(value: Any) -> Any:
    # SQLite hands JSON columns back as text
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


JsonObject = Annotated[dict[str, Any] | None, BeforeValidator(_decode_json)]


class PulseInputBase(BaseModel):
    """Fields common to every inbound pulse payload."""

    model_config = ConfigDict(extra="ignore")

    market_id: StrictStr = Field(..., alias="marketId")


class PulseRecordBase(BaseModel):
    """Fields common to every stored pulse record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    market_id: str = Field(..., alias="marketId")
    timestamp: datetime
    market: MarketSummary | None = None


class PulseSchema:
    """Field table for one pulse kind plus the models derived from it."""

    def __init__(self, kind: PulseKind, composite: str, fields: list[FieldSpec]):
        self.kind = kind
        self.composite = composite
        self.fields: tuple[FieldSpec, ...] = tuple(fields)
        self.by_alias = {f.alias: f for f in self.fields}
        self.input_model = self._build_input_model()
        self.record_model = self._build_record_model()

    @property
    def table(self) -> str:
        return self.kind.table

    @property
    def columns(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def numeric_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if not f.annotation]

    @property
    def annotation_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.annotation]

    def _build_input_model(self) -> type[BaseModel]:
        definitions: dict[str, Any] = {}
        for spec in self.fields:
            if spec.annotation:
                definitions[spec.name] = (
                    dict[str, Any] | None,
                    Field(None, alias=spec.alias),
                )
            else:
                definitions[spec.name] = (
                    float,
                    Field(
                        ...,
                        alias=spec.alias,
                        ge=spec.ge,
                        le=spec.le,
                        strict=True,
                        allow_inf_nan=False,
                    ),
                )
        name = f"{self.kind.value.capitalize()}PulseInput"
        return create_model(name, __base__=PulseInputBase, **definitions)

    def _build_record_model(self) -> type[PulseRecordBase]:
        definitions: dict[str, Any] = {}
        for spec in self.fields:
            if spec.annotation:
                definitions[spec.name] = (JsonObject, Field(None, alias=spec.alias))
            else:
                definitions[spec.name] = (float, Field(..., alias=spec.alias))
        name = f"{self.kind.value.capitalize()}Pulse"
        return create_model(name, __base__=PulseRecordBase, **definitions)

    def __repr__(self) -> str:
        return f"PulseSchema({self.kind.value}, fields={len(self.fields)})"


PULSE_SCHEMAS: dict[PulseKind, PulseSchema] = {
    PulseKind.SENTIMENT: PulseSchema(
        PulseKind.SENTIMENT,
        composite="sps",
        fields=[
            bounded("sps", "sps", -100, 100),
            bounded("fear_greed", "fearGreed", 0, 100),
            bounded("news_score", "newsScore", -100, 100),
            bounded("social_score", "socialScore", -100, 100),
            bounded("analyst_score", "analystScore", -100, 100),
            annotation("sources", "sources"),
        ],
    ),
    PulseKind.VOLATILITY: PulseSchema(
        PulseKind.VOLATILITY,
        composite="vpi",
        fields=[
            bounded("vpi", "vpi", 0, 100),
            bounded("implied_vol", "impliedVol", 0),
            bounded("realized_vol", "realizedVol", 0),
            bounded("vol_compression", "volCompression", -100, 100),
            bounded("vol_expansion", "volExpansion", -100, 100),
            annotation("forecast_5m", "forecast5m"),
            annotation("forecast_15m", "forecast15m"),
            annotation("forecast_30m", "forecast30m"),
        ],
    ),
    PulseKind.LIQUIDITY: PulseSchema(
        PulseKind.LIQUIDITY,
        composite="lms",
        fields=[
            bounded("lms", "lms", -100, 100),
            unbounded("etf_flow", "etfFlow"),
            bounded("volume", "volume", 0),
            bounded("bid_ask_spread", "bidAskSpread", 0),
            bounded("depth", "depth", 0),
            unbounded("inflows", "inflows"),
            unbounded("outflows", "outflows"),
            unbounded("net_flow", "netFlow"),
        ],
    ),
    PulseKind.MOMENTUM: PulseSchema(
        PulseKind.MOMENTUM,
        composite="mpm",
        fields=[
            bounded("mpm", "mpm", 0, 100),
            bounded("trend_strength", "trendStrength", 0, 100),
            bounded("trend_direction", "trendDirection", -1, 1),
            bounded("exhaustion", "exhaustion", 0, 100),
            annotation("mtf_data", "mtfData"),
        ],
    ),
    PulseKind.RISK: PulseSchema(
        PulseKind.RISK,
        composite="rtm",
        fields=[
            bounded("rtm", "rtm", 0, 100),
            bounded("leverage", "leverage", 0),
            bounded("funding_stress", "fundingStress", 0, 100),
            bounded("volatility_sync", "volatilitySync", 0, 100),
            bounded("liquidity_concentration", "liquidityConcentration", 0, 100),
            annotation("risk_factors", "riskFactors"),
        ],
    ),
    PulseKind.FLOW: PulseSchema(
        PulseKind.FLOW,
        composite="fds",
        fields=[
            bounded("fds", "fds", -100, 100),
            bounded("institutional_flow", "institutionalFlow", -100, 100),
            bounded("retail_flow", "retailFlow", -100, 100),
            bounded("sector_rotation", "sectorRotation", -100, 100),
            bounded("long_positioning", "longPositioning", -100, 100),
            bounded("short_positioning", "shortPositioning", -100, 100),
            bounded("net_positioning", "netPositioning", -100, 100),
        ],
    ),
}


def get_schema(kind: PulseKind | str) -> PulseSchema:
    """Look up the schema for a kind. Raises ValueError on unknown kinds."""
    return PULSE_SCHEMAS[PulseKind(kind)]
