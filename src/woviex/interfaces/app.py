"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from woviex import __version__
from woviex.infrastructure.config import AppConfig
from woviex.interfaces.api.envelope import fail
from woviex.interfaces.api.middleware import OriginWhitelistMiddleware
from woviex.interfaces.app_state import AppState
from woviex.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def loggable_path(path: str) -> str:
    """Request path with any stream token masked."""
    if path.startswith("/stream/"):
        return "/stream/<token>"
    return path


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app (configuration ONLY, NO resource initialization).

    Resources (HTTP client, record store, resolver) are created in lifespan().
    """
    app = FastAPI(
        title="Woviex",
        description="Embed page video resolver with an encrypted streaming proxy",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    app.add_middleware(OriginWhitelistMiddleware)

    from woviex.interfaces.api.admin.domains import router as domains_router
    from woviex.interfaces.api.admin.logs import router as logs_router
    from woviex.interfaces.api.admin.router import router as admin_router
    from woviex.interfaces.api.auth.router import router as auth_router
    from woviex.interfaces.api.player.router import router as player_router
    from woviex.interfaces.api.stream.router import router as stream_router
    from woviex.interfaces.api.video.router import router as video_router

    app.include_router(video_router)
    app.include_router(stream_router)
    app.include_router(player_router)
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(domains_router)
    app.include_router(logs_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        response = fail(str(exc.detail), exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        message = first.get("msg", "Invalid request")
        return fail(f"{field}: {message}" if field else message, 400)

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        """Liveness probe. Returns 200 as long as the process is running."""
        return {"status": "ok", "version": __version__}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=loggable_path(request.url.path),
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
