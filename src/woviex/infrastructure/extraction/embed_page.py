"""Embed page extractor: fetches the letsembed download page for a video id
and runs the media URL heuristics over it.

Source URL pattern::

    https://dl.letsembed.cc/?id={video_id}
    https://dl.letsembed.cc/season/{season}/episode/{episode}?id={video_id}
"""

from __future__ import annotations

from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx
import structlog

from woviex.domain.entities.video import ExtractedVideo
from woviex.domain.exceptions import ExtractionFailed, UpstreamError
from woviex.infrastructure.extraction.heuristics import (
    extract_quality,
    extract_title,
    find_media_url,
)
from woviex.infrastructure.extraction.html_selectors import parse_html

log = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://dl.letsembed.cc/"


def build_source_url(
    base_url: str,
    video_id: str,
    season: str | None = None,
    episode: str | None = None,
) -> str:
    """Build the embed page URL for a video (+ optional season/episode).

    >>> build_source_url("https://dl.letsembed.cc/", "42")
    'https://dl.letsembed.cc/?id=42'
    >>> build_source_url("https://dl.letsembed.cc/", "42", "1", "3")
    'https://dl.letsembed.cc/season/1/episode/3?id=42'
    """
    parts = urlsplit(base_url)
    path = parts.path or "/"
    segments = []
    if season:
        segments.append(f"season/{season}")
    if episode:
        segments.append(f"episode/{episode}")
    if segments:
        path = path.rstrip("/") + "/" + "/".join(segments)
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode({"id": video_id}), ""))


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}/"


class EmbedPageExtractor:
    """Scrapes a direct media URL from an embed page.

    Owns its HTTP session so ``reset()`` can drop a wedged connection pool
    before the resolver's single retry.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        title_suffix: str = " - letsembed.cc",
        user_agent: str = "Mozilla/5.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._title_suffix = title_suffix
        self._user_agent = user_agent
        self._transport = transport
        self._client = self._new_client()

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"User-Agent": self._user_agent},
            follow_redirects=True,
            transport=self._transport,
        )

    async def extract(
        self,
        video_id: str,
        season: str | None = None,
        episode: str | None = None,
        *,
        timeout: float = 30.0,
    ) -> ExtractedVideo:
        source_url = build_source_url(self._base_url, video_id, season, episode)
        log.debug("embed_page_fetch", video_id=video_id, url=source_url)

        try:
            resp = await self._client.get(source_url, timeout=timeout)
        except httpx.HTTPError as exc:
            log.warning(
                "embed_page_request_failed",
                video_id=video_id,
                error=type(exc).__name__,
            )
            raise UpstreamError(f"Failed to fetch embed page: {exc}") from exc

        if not resp.is_success:
            log.warning(
                "embed_page_http_error",
                video_id=video_id,
                status=resp.status_code,
            )
            raise UpstreamError(
                f"HTTP error! Status: {resp.status_code}",
                status_code=resp.status_code,
            )

        page = resp.text
        soup = parse_html(page)
        match = find_media_url(page, origin_of(source_url), soup=soup)
        if match is None:
            log.warning("embed_page_no_media_url", video_id=video_id)
            raise ExtractionFailed("no media URL found")

        url = match.url
        if match.needs_redirect_resolution:
            url = await self._follow_redirects(url, timeout=timeout)

        log.info(
            "embed_page_extracted",
            video_id=video_id,
            strategy=match.strategy,
            host=urlsplit(url).netloc,
        )
        return ExtractedVideo(
            title=extract_title(soup, video_id, self._title_suffix),
            url=url,
            quality=extract_quality(soup),
        )

    async def _follow_redirects(self, url: str, *, timeout: float) -> str:
        """HEAD the download link and return where it finally lands.

        A failed HEAD keeps the unresolved link.
        """
        # read the client per call: a reset() during the GET closed the old one
        try:
            resp = await self._client.head(url, follow_redirects=True, timeout=timeout)
        except httpx.HTTPError:
            log.warning("download_link_head_failed", host=urlsplit(url).netloc)
            return url
        if resp.is_success:
            return str(resp.url)
        log.warning("download_link_head_status", status=resp.status_code)
        return url

    async def reset(self) -> None:
        """Swap in a fresh client, then close the old one.

        Requests started after the swap never see a closed client.
        """
        old, self._client = self._client, self._new_client()
        await old.aclose()
        log.info("embed_page_client_reset")

    async def aclose(self) -> None:
        await self._client.aclose()
