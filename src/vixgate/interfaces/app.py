"""FastAPI application factory."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from vixgate import __version__
from vixgate.infrastructure.config import AppConfig
from vixgate.infrastructure.graceful_shutdown import GracefulShutdown
from vixgate.interfaces.api.stremio import router as stremio_router
from vixgate.interfaces.app_state import AppState
from vixgate.interfaces.composition import lifespan

log = structlog.get_logger(__name__)

_Handler = Callable[[Request], Awaitable[Response]]


async def _track_request(request: Request, call_next: _Handler) -> Response:
    """Count the request as in flight and emit one ``http_request`` line."""
    shutdown: GracefulShutdown = request.app.state.graceful_shutdown
    started = time.perf_counter()
    status_code = 500
    try:
        async with shutdown.track():
            response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        log.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
            client_host=request.client.host if request.client else None,
        )


def _add_probes(app: FastAPI, config: AppConfig) -> None:
    @app.get("/healthz")
    async def healthz() -> dict[str, str | bool]:
        """Liveness: answers while the process runs."""
        return {"status": "ok", "provider_enabled": config.provider.enabled}

    @app.get("/readyz")
    async def readyz() -> Response:
        """Readiness: 503 until startup completes and again while draining."""
        if app.state.graceful_shutdown.is_ready:
            return JSONResponse({"status": "ready"})
        return JSONResponse({"status": "not_ready"}, status_code=503)


def create_app(config: AppConfig) -> FastAPI:
    """Build the app around *config*; shared resources are created in lifespan()."""
    app = FastAPI(
        title=config.addon.name,
        description=config.addon.description,
        version=__version__,
        lifespan=lifespan,
    )

    state = AppState()
    state.config = config
    state.graceful_shutdown = GracefulShutdown()
    app.state = state

    app.include_router(stremio_router)
    _add_probes(app, config)
    app.middleware("http")(_track_request)

    return app
