from __future__ import annotations

from fastapi import APIRouter, Depends, FastAPI

from prodmgr.api import debug, maintenance
from prodmgr.api.rate_limit import api_limiter, rate_limit_dependency
from prodmgr.core.config import settings
from prodmgr.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Production Manager Ops")

    api = APIRouter(prefix="/api", dependencies=[Depends(rate_limit_dependency(api_limiter))])

    @api.get("/health")
    def health() -> dict[str, bool]:
        return {"ok": True}

    if settings.debug_routes_enabled:
        api.include_router(debug.router)
        api.include_router(maintenance.router)

    app.include_router(api)
    return app


app = create_app()
