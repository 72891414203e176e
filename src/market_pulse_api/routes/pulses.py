"""One router per pulse kind, all built from the same template."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from market_pulse.service import PulseStore
from market_pulse.shared.enums import PulseKind
from market_pulse_api.dependencies import dump, get_store, read_json
from market_pulse_api.errors import guarded


def build_pulse_router(kind: PulseKind) -> APIRouter:
    """GET (list) and POST (create) under /api/<kind>."""
    router = APIRouter(prefix=f"/api/{kind.value}", tags=[kind.value])

    @router.get("", name=f"list_{kind.value}_pulses")
    async def list_pulses(
        market_id: str | None = Query(None, alias="marketId"),
        limit: str | None = Query(None, description="Max records (default 100)"),
        offset: str | None = Query(None, description="Records to skip (default 0)"),
        store: PulseStore = Depends(get_store),
    ) -> JSONResponse:
        records = await guarded(
            f"fetch {kind.value} pulses",
            store.list_pulses(kind, market_id=market_id, limit=limit, offset=offset),
        )
        return JSONResponse(content=[dump(r) for r in records])

    @router.post("", name=f"create_{kind.value}_pulse")
    async def create_pulse(
        request: Request, store: PulseStore = Depends(get_store)
    ) -> JSONResponse:
        body = await read_json(request)
        record = await guarded(f"create {kind.value} pulse", store.create_pulse(kind, body))
        return JSONResponse(status_code=201, content=dump(record))

    return router
