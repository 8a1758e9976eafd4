"""Public video resolution endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from woviex.domain.entities.video import VideoRecord
from woviex.domain.exceptions import ExtractionFailed, InvalidVideoId, UpstreamError
from woviex.interfaces.api.envelope import fail, ok
from woviex.interfaces.api.video.presenter import base_url, present_video, stream_url
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["video"])


def resolution_error_status(exc: Exception) -> int:
    """HTTP status for a resolver failure."""
    if isinstance(exc, InvalidVideoId):
        return 400
    if isinstance(exc, UpstreamError):
        return 502
    return 500


async def resolve_or_error(
    state: AppState,
    video_id: str,
    season: str | None = None,
    episode: str | None = None,
) -> VideoRecord | JSONResponse:
    try:
        return await state.resolver.resolve(video_id, season, episode)
    except (InvalidVideoId, ExtractionFailed, UpstreamError) as e:
        log.warning(
            "video_resolve_failed",
            video_id=video_id,
            season=season,
            episode=episode,
            error=str(e),
        )
        return fail(str(e), resolution_error_status(e))


async def _video_response(
    request: Request,
    video_id: str,
    season: str | None = None,
    episode: str | None = None,
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    result = await resolve_or_error(state, video_id, season, episode)
    if isinstance(result, JSONResponse):
        return result
    base = base_url(request, state.config.public_base_url)
    return ok(present_video(result, state.vault, base))


@router.get("/api/video/{video_id}")
async def get_video(video_id: str, request: Request) -> JSONResponse:
    """Resolve a video id to its metadata and an encrypted stream link."""
    return await _video_response(request, video_id)


@router.get("/api/video/{season}/{episode}/{video_id}")
async def get_episode(
    season: str, episode: str, video_id: str, request: Request
) -> JSONResponse:
    return await _video_response(request, video_id, season, episode)


@router.get("/api/videos/recent")
async def recent_videos(
    request: Request,
    limit: int = Query(default=10, ge=1, le=100),
) -> JSONResponse:
    """Most recently accessed videos, newest first."""
    state = cast(AppState, request.app.state)
    records = await state.store.list_recent_videos(limit)
    base = base_url(request, state.config.public_base_url)
    return ok([present_video(r, state.vault, base) for r in records])


@router.get("/tahh/{video_id}")
async def redirect_to_stream(video_id: str, request: Request) -> Response:
    """Redirect straight to the proxied stream of a video."""
    state = cast(AppState, request.app.state)
    result = await resolve_or_error(state, video_id)
    if isinstance(result, JSONResponse):
        return result
    base = base_url(request, state.config.public_base_url)
    return RedirectResponse(stream_url(result, state.vault, base), status_code=302)
