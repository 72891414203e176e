from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from market_pulse.service import PulseStore
from market_pulse.shared.errors import FieldViolation, ValidationError
from market_pulse_api.dependencies import dump, get_store
from market_pulse_api.errors import guarded

router = APIRouter(prefix="/api", tags=["history"])


def _parse_datetime(field: str, value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError([FieldViolation(field, "ISO-8601 datetime", value)]) from None


@router.get("/historical")
async def pulse_history(
    market_id: str | None = Query(None, alias="marketId"),
    pulse_type: str | None = Query(None, alias="pulseType"),
    timeframe: str | None = Query(None, description="5m, 15m, 1h, 4h, 1d, 1w, 1M, 3M, 1y"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    store: PulseStore = Depends(get_store),
) -> JSONResponse:
    """Oldest-first records of one market and kind, with per-interval summaries."""
    start = _parse_datetime("startDate", start_date)
    end = _parse_datetime("endDate", end_date)
    report = await guarded(
        "fetch historical data",
        store.history_report(
            pulse_type,
            market_id,
            timeframe=timeframe,
            start=start,
            end=end,
            limit=limit,
            offset=offset,
        ),
    )
    return JSONResponse(content={"success": True, **dump(report)})
