"""Range-aware streaming proxy for encrypted stream tokens."""

from __future__ import annotations

from typing import cast
from urllib.parse import urlsplit

import httpx
import structlog
from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from woviex.domain.exceptions import InvalidToken, RangeNotSatisfiable
from woviex.infrastructure.streaming.range_proxy import (
    ByteRange,
    open_upstream,
    parse_range_header,
    probe_upstream,
)
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stream"])


@router.get("/stream/{token}")
async def stream_video(token: str, request: Request) -> Response:
    """Relay the media behind *token*, honouring a single byte ``Range``.

    Flow:
        1. Decrypt the token (403 on failure)
        2. HEAD upstream for size and type (non-200 is passed through)
        3. Ranged GET -> 206, otherwise full GET -> 200
    The decrypted URL is never returned and only its host is logged.
    """
    state = cast(AppState, request.app.state)
    stats = state.metrics.stream
    stats.requests += 1

    try:
        url = state.vault.decrypt(token)
    except InvalidToken as e:
        stats.invalid_tokens += 1
        log.warning("stream_token_invalid", reason=str(e))
        return PlainTextResponse("Invalid stream token", status_code=403)

    host = urlsplit(url).netloc
    config = state.config
    try:
        info = await probe_upstream(
            state.http_client, url, timeout=config.http_timeout_seconds
        )
        if info.status_code != 200:
            stats.upstream_errors += 1
            log.warning("stream_upstream_status", host=host, status=info.status_code)
            return PlainTextResponse(
                f"Upstream responded with {info.status_code}",
                status_code=info.status_code,
            )

        byte_range: ByteRange | None = None
        if info.content_length is not None:
            try:
                byte_range = parse_range_header(
                    request.headers.get("range"), info.content_length
                )
            except RangeNotSatisfiable as e:
                return Response(
                    status_code=416,
                    headers={"Content-Range": f"bytes */{e.total}"},
                )

        upstream, body = await open_upstream(
            state.http_client,
            url,
            byte_range,
            connect_timeout=config.http_connect_timeout_seconds,
        )
    except httpx.HTTPError as e:
        stats.upstream_errors += 1
        log.error("stream_upstream_failed", host=host, error=type(e).__name__)
        return PlainTextResponse("Error streaming video", status_code=500)

    if upstream.status_code not in (200, 206):
        await upstream.aclose()
        stats.upstream_errors += 1
        log.warning("stream_upstream_status", host=host, status=upstream.status_code)
        return PlainTextResponse(
            f"Upstream responded with {upstream.status_code}",
            status_code=upstream.status_code,
        )

    headers = {
        "Accept-Ranges": "bytes",
        "Content-Type": info.content_type,
    }
    if byte_range is not None and upstream.status_code == 206:
        stats.partial += 1
        headers["Content-Range"] = byte_range.content_range
        headers["Content-Length"] = str(byte_range.length)
        status_code = 206
    else:
        # upstream ignored the Range (or none was asked): full body
        if info.content_length is not None:
            headers["Content-Length"] = str(info.content_length)
        status_code = 200

    log.info(
        "stream_started",
        host=host,
        status=status_code,
        range=byte_range.header_value if byte_range else None,
    )
    return StreamingResponse(
        body,
        status_code=status_code,
        headers=headers,
        background=BackgroundTask(upstream.aclose),
    )
