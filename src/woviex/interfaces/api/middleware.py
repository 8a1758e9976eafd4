"""FastAPI middleware for the origin whitelist."""

from __future__ import annotations

from typing import cast

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from woviex.interfaces.api.envelope import fail
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

EXEMPT_PREFIXES: tuple[str, ...] = (
    "/api/auth/login",
    "/api/video/",
    "/api/videos/recent",
    "/api/health",
)


def is_exempt(path: str) -> bool:
    return not path.startswith("/api/") or path.startswith(EXEMPT_PREFIXES)


class OriginWhitelistMiddleware(BaseHTTPMiddleware):
    """Rejects /api requests whose Origin (or Referer) is not whitelisted.

    The policy itself lives on ``app.state.origin_policy`` (built in the
    lifespan) and is a no-op unless enforcement is enabled in config.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if is_exempt(path):
            return await call_next(request)

        state = cast(AppState, request.app.state)
        origin = request.headers.get("origin")
        referer = request.headers.get("referer")
        if await state.origin_policy.is_allowed(origin, referer):
            return await call_next(request)

        await state.activity_log.warn(
            "Security", f"Rejected request to {path} from origin {origin or referer}"
        )
        return fail("Access denied: Origin not whitelisted", 403)
