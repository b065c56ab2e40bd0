from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from src.adapters.api.controllers.realtime import router as realtime_router
from src.adapters.api.dependencies import ProxyServices, get_services
from src.adapters.api.schemas.realtime import HealthSchema
from src.domain.exceptions.feed import ConfigError

health_router = APIRouter(tags=["health"])


@health_router.get("/healthz", response_model=HealthSchema)
def health() -> HealthSchema:
    return HealthSchema(ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    refresher = app.state.services.route_refresher
    if refresher is not None:
        refresher.start()
    try:
        yield
    finally:
        if refresher is not None:
            await refresher.stop()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON, never a raw trace or HTML page."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = request.app.state.services.config.reveal_errors
    if reveal or isinstance(exc, ConfigError):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"error": detail})


def mount_public_dir(target: FastAPI, public_dir: str | Path) -> bool:
    """Serve a static site at `/` (index.html for the root) if it exists."""

    path = Path(public_dir)
    if not path.is_dir():
        return False
    target.mount("/", StaticFiles(directory=path, html=True), name="public")
    return True


def create_app(services: ProxyServices | None = None) -> FastAPI:
    services = services or get_services()

    application = FastAPI(title="Vehicle Positions Proxy", lifespan=lifespan)
    application.state.services = services
    application.include_router(health_router)
    application.include_router(realtime_router)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    # Mounted last so the API routes above take precedence.
    mount_public_dir(application, services.config.public_dir)
    return application


app = create_app()


def run() -> None:
    import uvicorn

    cfg = app.state.services.config
    logging.getLogger("uvicorn.error").info(
        "Proxying %s on http://%s:%d", cfg.vehicle_positions_url, cfg.host, cfg.port
    )
    uvicorn.run(app, host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    run()
