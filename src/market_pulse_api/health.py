from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.infrastructure.observability import get_api_logger
from market_pulse_api.dependencies import get_db

log = get_api_logger("health")

router = APIRouter()

VERSION = "0.1.0"


async def check_database(db: IDatabaseAdapter) -> bool:
    """Check database connectivity."""
    healthy = await db.ping()
    if not healthy:
        log.error("database_health_check_failed", backend=db.backend)
    return healthy


@router.get("/health")
async def health_check(db: IDatabaseAdapter = Depends(get_db)) -> dict[str, Any]:
    """Health check endpoint."""
    health_status = {
        "status": "healthy",
        "services": {
            "database": await check_database(db),
        },
        "version": VERSION,
    }

    if not all(health_status["services"].values()):
        health_status["status"] = "unhealthy"
        raise HTTPException(status_code=503, detail=health_status)

    return health_status


@router.get("/ready")
async def readiness_check() -> dict[str, Any]:
    """Readiness check for Kubernetes."""
    return {"status": "ready"}
