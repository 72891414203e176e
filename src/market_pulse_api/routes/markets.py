from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from market_pulse.service import PulseStore
from market_pulse_api.dependencies import dump, get_store, read_json
from market_pulse_api.errors import guarded

router = APIRouter(prefix="/api/markets", tags=["markets"])


@router.get("")
async def list_markets(store: PulseStore = Depends(get_store)) -> JSONResponse:
    """All markets by name, each with per-kind pulse counts."""
    markets = await guarded("fetch markets", store.list_markets())
    return JSONResponse(content=[dump(m) for m in markets])


@router.post("")
async def create_market(
    request: Request, store: PulseStore = Depends(get_store)
) -> JSONResponse:
    body = await read_json(request)
    market = await guarded("create market", store.create_market(body))
    return JSONResponse(status_code=201, content=dump(market))


@router.get("/{market_id}/latest")
async def latest_pulses(
    market_id: str, store: PulseStore = Depends(get_store)
) -> JSONResponse:
    """Newest record of every pulse kind for one market."""
    snapshot = await guarded("fetch latest pulses", store.latest_pulses(market_id))
    return JSONResponse(
        content={
            kind: dump(record) if record is not None else None
            for kind, record in snapshot.items()
        }
    )
