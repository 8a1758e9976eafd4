"""Full-page embeddable player (Plyr) for a resolved video."""

from __future__ import annotations

import html
from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse

from woviex.interfaces.api.video.presenter import base_url, stream_url
from woviex.interfaces.api.video.router import resolve_or_error
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/fulltaah", tags=["player"])

_PLYR_VERSION = "3.7.8"

_PLAYER_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <link rel="stylesheet" href="https://cdn.plyr.io/{plyr}/plyr.css">
  <style>
    html, body {{ margin: 0; padding: 0; width: 100%; height: 100%;
                  overflow: hidden; background-color: #000; }}
    .plyr {{ height: 100%; }}
    video {{ width: 100%; height: 100%; }}
  </style>
</head>
<body>
  <video id="player" playsinline controls>
    <source src="{src}" type="video/mp4">
  </video>
  <script src="https://cdn.plyr.io/{plyr}/plyr.polyfilled.js"></script>
  <script>
    document.addEventListener('DOMContentLoaded', function () {{
      const player = new Plyr('#player', {{
        fullscreen: {{ enabled: true, fallback: true, iosNative: true }},
        controls: ['play-large', 'play', 'progress', 'current-time', 'mute',
                   'volume', 'captions', 'settings', 'pip', 'airplay', 'fullscreen'],
      }});
      player.on('ready', () => player.play());
    }});
  </script>
</body>
</html>
"""

_ERROR_PAGE = """<!DOCTYPE html>
<html>
<head><title>Error</title></head>
<body>
  <h1>Error</h1>
  <p>{message}</p>
</body>
</html>
"""


def render_player(title: str, src: str) -> str:
    return _PLAYER_PAGE.format(
        title=html.escape(title or "Video Player"),
        src=html.escape(src, quote=True),
        plyr=_PLYR_VERSION,
    )


def render_error(message: str) -> str:
    return _ERROR_PAGE.format(message=html.escape(message))


async def _player(
    request: Request,
    video_id: str,
    season: str | None = None,
    episode: str | None = None,
) -> HTMLResponse:
    state = cast(AppState, request.app.state)

    allowed = await state.origin_policy.is_allowed(
        request.headers.get("origin"), request.headers.get("referer")
    )
    if not allowed:
        await state.activity_log.warn(
            "Security", f"Blocked embed of video {video_id} from a foreign site"
        )
        return HTMLResponse(render_error("Embedding is not allowed"), status_code=403)

    result = await resolve_or_error(state, video_id, season, episode)
    if isinstance(result, JSONResponse):
        return HTMLResponse(
            render_error("Video could not be loaded"), status_code=result.status_code
        )

    base = base_url(request, state.config.public_base_url)
    log.info("player_served", video_id=video_id, season=season, episode=episode)
    return HTMLResponse(render_player(result.title, stream_url(result, state.vault, base)))


@router.get("/{video_id}")
async def player(video_id: str, request: Request) -> HTMLResponse:
    return await _player(request, video_id)


@router.get("/{season}/{episode}/{video_id}")
async def episode_player(
    season: str, episode: str, video_id: str, request: Request
) -> HTMLResponse:
    return await _player(request, video_id, season, episode)
