"""History report: records of one market and kind plus per-interval summaries.

Records are grouped into fixed-width intervals aligned to the Unix epoch
(the interval width is the query's timeframe). Each interval reports its
record count and, for every numeric field of the kind:

    <field>_avg, <field>_min, <field>_max, <field>_first, <field>_last

keyed by the field's wire name (e.g. "fearGreed_avg"). Annotation payloads
are not summarised.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny

from market_pulse.shared.enums import PulseKind
from market_pulse.storage.schemas.pulses import PulseRecordBase, PulseSchema

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class IntervalSummary(BaseModel):
    """One interval: start, record count and per-field statistics as extra keys."""

    model_config = ConfigDict(extra="allow")

    timestamp: datetime
    count: int


class HistoryMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    market_id: str = Field(..., alias="marketId")
    pulse_type: PulseKind = Field(..., alias="pulseType")
    timeframe: str
    count: int
    start_date: datetime | None = Field(None, alias="startDate")
    end_date: datetime | None = Field(None, alias="endDate")


class HistoryReport(BaseModel):
    data: list[SerializeAsAny[PulseRecordBase]]
    aggregated: list[IntervalSummary]
    metadata: HistoryMetadata


def interval_start(timestamp: datetime, interval: timedelta) -> datetime:
    """Start of the epoch-aligned interval containing `timestamp`."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return EPOCH + ((timestamp - EPOCH) // interval) * interval


def summarize_interval(
    start: datetime,
    records: Sequence[PulseRecordBase],
    schema: PulseSchema,
) -> IntervalSummary:
    stats: dict[str, Any] = {}
    for spec in schema.numeric_fields:
        values = [getattr(r, spec.name) for r in records if getattr(r, spec.name) is not None]
        if not values:
            continue
        stats[f"{spec.alias}_avg"] = sum(values) / len(values)
        stats[f"{spec.alias}_min"] = min(values)
        stats[f"{spec.alias}_max"] = max(values)
        stats[f"{spec.alias}_first"] = values[0]
        stats[f"{spec.alias}_last"] = values[-1]
    return IntervalSummary(timestamp=start, count=len(records), **stats)


def aggregate(
    records: Sequence[PulseRecordBase],
    schema: PulseSchema,
    interval: timedelta,
) -> list[IntervalSummary]:
    """Summarise oldest-first records per interval. Empty intervals are omitted."""
    summaries: list[IntervalSummary] = []
    current_start: datetime | None = None
    current: list[PulseRecordBase] = []

    for record in records:
        start = interval_start(record.timestamp, interval)
        if start != current_start:
            if current:
                summaries.append(summarize_interval(current_start, current, schema))
            current_start, current = start, []
        current.append(record)

    if current:
        summaries.append(summarize_interval(current_start, current, schema))
    return summaries
