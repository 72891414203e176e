from contextlib import asynccontextmanager

from fastapi import FastAPI

from market_pulse.config import ConfigState, get_config
from market_pulse.infrastructure.database import IDatabaseAdapter, create_adapter
from market_pulse.infrastructure.observability import get_api_logger, setup_logging
from market_pulse.service import PulseStore
from market_pulse.shared.enums import PulseKind
from market_pulse.storage import create_tables
from market_pulse_api.errors import register_error_handlers
from market_pulse_api.health import VERSION
from market_pulse_api.health import router as health_router
from market_pulse_api.routes import build_pulse_router, history_router, markets_router

log = get_api_logger("app")


def create_app(
    config: ConfigState | None = None,
    db: IDatabaseAdapter | None = None,
) -> FastAPI:
    """Build the API. The database handle lives exactly as long as the app."""
    config = config or get_config()
    setup_logging(level=config.logging.level, json_logs=config.logging.json_logs)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        adapter = db or create_adapter(config.database)
        await adapter.connect()
        try:
            await create_tables(adapter)
            app.state.db = adapter
            app.state.store = PulseStore(
                adapter,
                default_limit=config.api.default_limit,
                max_limit=config.api.max_limit,
            )
            log.info("api_started", backend=adapter.backend, env=config.env)
            yield
        finally:
            await adapter.disconnect()
            log.info("api_stopped")

    app = FastAPI(title=config.api.title, version=VERSION, lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router, prefix="")
    app.include_router(markets_router)
    app.include_router(history_router)
    for kind in PulseKind:
        app.include_router(build_pulse_router(kind))

    @app.get("/")
    async def root():
        return {"message": "Market Pulse API is running"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
