"""Pulse store service.

The single entry point callers (HTTP routes, scripts, tests) use to register
markets and to write and query pulse records. The storage handle is passed in
explicitly; the service holds no connection state of its own.

Usage:

    db = SQLiteAdapter(":memory:")
    await db.connect()
    await create_tables(db)

    store = PulseStore(db)
    market = await store.create_market({"name": "Apple", "symbol": "AAPL", "type": "EQUITY"})
    await store.create_pulse("sentiment", {"marketId": market.id, "sps": 42, ...})
    page = await store.list_pulses("sentiment", market_id=market.id, limit="10")
"""

import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from market_pulse.aggregation import HistoryMetadata, HistoryReport, aggregate
from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.infrastructure.observability import get_storage_logger
from market_pulse.shared.enums import PulseKind
from market_pulse.shared.errors import FieldViolation, NotFoundError, ValidationError
from market_pulse.storage.repositories import (
    MarketRepository,
    MarketSummaryAggregator,
    PulseRepository,
)
from market_pulse.storage.schemas import (
    PULSE_SCHEMAS,
    Market,
    MarketWithCounts,
    PulseRecordBase,
)
from market_pulse.validation import validate_market, validate_pulse

log = get_storage_logger("pulse-store")

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000
DEFAULT_TIMEFRAME = "1h"

# Lookback windows for history queries; unknown timeframes fall back to 1h.
TIMEFRAMES: dict[str, timedelta] = {
    "5m": timedelta(minutes=5),
    "15m": timedelta(minutes=15),
    "1h": timedelta(hours=1),
    "4h": timedelta(hours=4),
    "1d": timedelta(days=1),
    "1w": timedelta(weeks=1),
    "1M": timedelta(days=30),
    "3M": timedelta(days=90),
    "1y": timedelta(days=365),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_window(
    limit: Any = None,
    offset: Any = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> tuple[int, int]:
    """Resolve a (limit, offset) pair from raw query values.

    Missing, non-numeric or non-positive limits fall back to `default_limit`;
    limits above `max_limit` are capped. Missing, non-numeric or negative
    offsets fall back to 0.
    """
    parsed_limit = _to_int(limit)
    if parsed_limit is None or parsed_limit <= 0:
        parsed_limit = default_limit
    parsed_limit = min(parsed_limit, max_limit)

    parsed_offset = _to_int(offset)
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = 0

    return parsed_limit, parsed_offset


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_timeframe(timeframe: str | None) -> tuple[str, timedelta]:
    """Known timeframe name and its width; anything else resolves to 1h."""
    name = timeframe if timeframe in TIMEFRAMES else DEFAULT_TIMEFRAME
    return name, TIMEFRAMES[name]


def _parse_kind(kind: PulseKind | str, field: str = "kind") -> PulseKind:
    try:
        return PulseKind(kind)
    except ValueError:
        allowed = ", ".join(k.value for k in PulseKind)
        raise ValidationError([FieldViolation(field, f"one of {allowed}", kind)]) from None


class PulseStore:
    """Market registry plus validated, queryable pulse storage."""

    def __init__(
        self,
        db: IDatabaseAdapter,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        self.db = db
        self.clock = clock
        self.id_factory = id_factory
        self.default_limit = default_limit
        self.max_limit = max_limit

        self.markets = MarketRepository(db)
        self.aggregator = MarketSummaryAggregator(db)
        self.pulses: dict[PulseKind, PulseRepository] = {
            kind: PulseRepository(db, schema) for kind, schema in PULSE_SCHEMAS.items()
        }

    # ------------------------------------------------------------------
    # Market registry
    # ------------------------------------------------------------------

    async def create_market(self, raw: Any) -> Market:
        """Validate and register a market.

        Raises:
            ValidationError: Empty name/symbol or unknown type
            ConflictError: Symbol already registered
        """
        data = validate_market(raw)
        return await self.markets.create(self.id_factory(), data, as_utc(self.clock()))

    async def get_market(self, market_id: str) -> Market:
        market = await self.markets.find_by_id(market_id)
        if market is None:
            raise NotFoundError(f"Market '{market_id}' not found", entity="market", key=market_id)
        return market

    async def list_markets(self) -> list[MarketWithCounts]:
        """All markets by name ascending, each with per-kind pulse counts."""
        markets = await self.markets.find_all()
        return await self.aggregator.annotate(markets)

    # ------------------------------------------------------------------
    # Pulses
    # ------------------------------------------------------------------

    async def create_pulse(self, kind: PulseKind | str, raw: Any) -> PulseRecordBase:
        """Validate, persist and return a pulse joined with its market summary.

        Raises:
            ValidationError: Payload violates the kind's schema
            NotFoundError: marketId does not reference a registered market
        """
        pulse_kind = _parse_kind(kind)
        data = validate_pulse(pulse_kind, raw)

        market = await self.markets.find_by_id(data.market_id)
        if market is None:
            log.info("pulse_market_missing", kind=pulse_kind.value, market_id=data.market_id)
            raise NotFoundError(
                f"Market '{data.market_id}' not found", entity="market", key=data.market_id
            )

        record = await self.pulses[pulse_kind].insert(
            self.id_factory(),
            as_utc(self.clock()),
            data,
            market.to_summary(),
        )
        log.info(
            "pulse_created",
            kind=pulse_kind.value,
            pulse_id=record.id,
            market_id=record.market_id,
        )
        return record

    async def list_pulses(
        self,
        kind: PulseKind | str,
        market_id: str | None = None,
        limit: Any = None,
        offset: Any = None,
    ) -> list[PulseRecordBase]:
        """Newest-first page of one kind, optionally for a single market.

        An empty or missing market_id lists across all markets.
        """
        pulse_kind = _parse_kind(kind)
        page_limit, page_offset = parse_window(
            limit, offset, self.default_limit, self.max_limit
        )
        return await self.pulses[pulse_kind].find_latest(
            market_id or None, limit=page_limit, offset=page_offset
        )

    async def pulse_history(
        self,
        kind: PulseKind | str | None,
        market_id: str | None,
        timeframe: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: Any = None,
        offset: Any = None,
    ) -> list[PulseRecordBase]:
        """Oldest-first records of one market within a time window.

        With both `start` and `end` the window is [start, end]. Otherwise it
        opens `timeframe` ago and stays open-ended.
        """
        violations = []
        if not market_id:
            violations.append(FieldViolation("marketId", "required", market_id))
        if not kind:
            violations.append(FieldViolation("pulseType", "required", kind))
        if violations:
            raise ValidationError(violations)

        pulse_kind = _parse_kind(kind, field="pulseType")
        page_limit, page_offset = parse_window(
            limit, offset, self.default_limit, self.max_limit
        )

        if start is not None and end is not None:
            window_start, window_end = as_utc(start), as_utc(end)
        else:
            _, lookback = resolve_timeframe(timeframe)
            window_start, window_end = as_utc(self.clock()) - lookback, None

        return await self.pulses[pulse_kind].find_range(
            market_id,
            window_start,
            window_end,
            limit=page_limit,
            offset=page_offset,
        )

    async def history_report(
        self,
        kind: PulseKind | str | None,
        market_id: str | None,
        timeframe: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: Any = None,
        offset: Any = None,
    ) -> HistoryReport:
        """`pulse_history` records plus per-interval summaries and metadata.

        The interval width is the resolved timeframe, also when an explicit
        start/end window is given.
        """
        records = await self.pulse_history(
            kind, market_id, timeframe, start, end, limit=limit, offset=offset
        )
        pulse_kind = PulseKind(kind)
        name, interval = resolve_timeframe(timeframe)
        return HistoryReport(
            data=records,
            aggregated=aggregate(records, PULSE_SCHEMAS[pulse_kind], interval),
            metadata=HistoryMetadata(
                market_id=market_id,
                pulse_type=pulse_kind,
                timeframe=name,
                count=len(records),
                start_date=records[0].timestamp if records else None,
                end_date=records[-1].timestamp if records else None,
            ),
        )

    async def latest_pulses(self, market_id: str) -> dict[str, PulseRecordBase | None]:
        """Newest record of every kind for one market (None where a kind has none)."""
        await self.get_market(market_id)
        return {
            kind.value: await repository.find_newest(market_id)
            for kind, repository in self.pulses.items()
        }
