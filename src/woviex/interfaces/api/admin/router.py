"""Admin endpoints: scraper settings, cache control, stats and mirror toggle."""

from __future__ import annotations

from typing import Optional, cast

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
)

from woviex.domain.exceptions import ExtractionFailed, InvalidVideoId, UpstreamError
from woviex.interfaces.api.deps import require_admin
from woviex.interfaces.api.envelope import fail, ok
from woviex.interfaces.api.video.presenter import base_url, present_video
from woviex.interfaces.api.video.router import resolution_error_status
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["admin"])


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their current value.

    Only the shape is checked here; ranges are ScraperSettings' job.
    """

    model_config = ConfigDict(populate_by_name=True)

    timeout: Optional[StrictInt] = None
    auto_retry: Optional[StrictBool] = Field(default=None, alias="autoRetry")
    cache_enabled: Optional[StrictBool] = Field(default=None, alias="cacheEnabled")
    cache_ttl: Optional[StrictInt] = Field(default=None, alias="cacheTTL")


# ----------------------------------------------------------------------
# settings
# ----------------------------------------------------------------------


def _validation_message(exc: ValidationError) -> str:
    """Failed fields joined by ``; ``, e.g. ``cacheTTL: Input should be ...``."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in exc.errors(include_url=False)
    )


@router.get("/settings", dependencies=[Depends(require_admin)])
async def get_settings(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    return ok(state.resolver.settings.to_dict())


@router.put("/settings", dependencies=[Depends(require_admin)])
async def update_settings(body: SettingsUpdate, request: Request) -> JSONResponse:
    """Apply a partial update; takes effect for subsequent resolutions."""
    state = cast(AppState, request.app.state)
    try:
        updated = await state.resolver.update_settings(**body.model_dump())
    except ValidationError as e:
        return fail(_validation_message(e), 400)
    return ok(updated.to_dict())


# ----------------------------------------------------------------------
# cache
# ----------------------------------------------------------------------


@router.post("/cache/clear", dependencies=[Depends(require_admin)])
async def clear_cache(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    removed = await state.resolver.clear_cache()
    return ok({"removed": removed}, message="Cache cleared successfully")


async def _refresh(
    request: Request,
    video_id: str,
    season: str | None = None,
    episode: str | None = None,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        record = await state.resolver.refresh(video_id, season, episode)
    except (InvalidVideoId, ExtractionFailed, UpstreamError) as e:
        return fail(str(e), resolution_error_status(e))
    base = base_url(request, state.config.public_base_url)
    return ok(present_video(record, state.vault, base))


@router.post("/cache/refresh/{video_id}", dependencies=[Depends(require_admin)])
async def refresh_video(video_id: str, request: Request) -> JSONResponse:
    """Force a re-extraction of one video."""
    return await _refresh(request, video_id)


@router.post(
    "/cache/refresh/{video_id}/{season}/{episode}",
    dependencies=[Depends(require_admin)],
)
async def refresh_episode(
    video_id: str, season: str, episode: str, request: Request
) -> JSONResponse:
    return await _refresh(request, video_id, season, episode)


# ----------------------------------------------------------------------
# stats
# ----------------------------------------------------------------------


@router.get("/stats")
async def stats(request: Request) -> JSONResponse:
    """Usage summary from the record store and the live metrics counters."""
    state = cast(AppState, request.app.state)
    videos = await state.store.list_videos()
    settings = state.resolver.settings
    resolution = state.metrics.resolution
    return ok(
        {
            "totalRequests": sum(v.access_count for v in videos),
            "uniqueVideos": len(videos),
            "cacheHitRate": round(
                100 * resolution.cache_hits / resolution.requests
                if resolution.requests
                else 0.0,
                1,
            ),
            "cacheEnabled": settings.cache_enabled,
            "scrapingTimeout": settings.timeout,
            "autoRetry": settings.auto_retry,
            "cache": state.resolution_cache.stats(),
            "metrics": state.metrics.snapshot(),
        }
    )


# ----------------------------------------------------------------------
# telegram mirror
# ----------------------------------------------------------------------


@router.get("/telegram/status")
async def telegram_status(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    return ok(state.mirror.status())


@router.post("/telegram/start", dependencies=[Depends(require_admin)])
async def telegram_start(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    if not state.mirror.status()["configured"]:
        return fail("Telegram mirror is not configured", 409)
    if state.mirror.start():
        await state.activity_log.info("Telegram", "Telegram mirror started")
    return ok(state.mirror.status(), message="Telegram bot started")


@router.post("/telegram/stop", dependencies=[Depends(require_admin)])
async def telegram_stop(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    if state.mirror.stop():
        await state.activity_log.info("Telegram", "Telegram mirror stopped")
    return ok(state.mirror.status(), message="Telegram bot stopped")
