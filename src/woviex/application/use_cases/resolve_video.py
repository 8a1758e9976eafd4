"""Video resolution use case: cache, record store, then extraction."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime
from typing import Any
from urllib.parse import parse_qsl, urlsplit

import structlog

from woviex.application.activity_log import ActivityLog
from woviex.domain.entities.admin import ScraperSettings
from woviex.domain.entities.video import (
    VIDEO_ID_RE,
    VideoRecord,
    build_cache_key,
    utcnow,
)
from woviex.domain.exceptions import ExtractionFailed, InvalidVideoId, UpstreamError
from woviex.domain.ports.record_store import RecordStorePort
from woviex.domain.ports.video_extractor import VideoExtractorPort
from woviex.infrastructure.cache.resolution_cache import ResolutionCache
from woviex.infrastructure.metrics import MetricsCollector

log = structlog.get_logger(__name__)

_EXPIRY_PARAMS = ("expires", "Expires")


def signed_url_expired(url: str, now: float) -> bool:
    """True if *url* carries an ``expires`` epoch query param in the past.

    >>> signed_url_expired("https://cdn/v.mp4?expires=100", now=200.0)
    True
    >>> signed_url_expired("https://cdn/v.mp4", now=200.0)
    False
    """
    for name, value in parse_qsl(urlsplit(url).query):
        if name in _EXPIRY_PARAMS and value.isdigit():
            return int(value) <= now
    return False


class VideoResolver:
    """Resolves a video id (plus optional season/episode) to a VideoRecord.

    Flow per request:
        1. Validate the id (digits only)
        2. Resolution cache, when caching is enabled
        3. Record store (skipped when the stored signed URL has expired or
           the record predates the last cache clear)
        4. Extraction; one retry with a fresh session when auto-retry is on

    Terminal failures are written to the activity log exactly once at
    ERROR; a failed first attempt that is retried is logged at WARN.
    """

    def __init__(
        self,
        extractor: VideoExtractorPort,
        cache: ResolutionCache,
        store: RecordStorePort,
        activity_log: ActivityLog,
        settings: ScraperSettings | None = None,
        metrics: MetricsCollector | None = None,
        *,
        revalidate_expired_urls: bool = True,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._extractor = extractor
        self._cache = cache
        self._store = store
        self._activity = activity_log
        self._settings = settings or ScraperSettings()
        self._metrics = metrics or MetricsCollector()
        self._revalidate = revalidate_expired_urls
        self._wall_clock = wall_clock
        # stored records resolved at or before this instant are re-extracted
        self._cleared_at: datetime | None = None

    @property
    def settings(self) -> ScraperSettings:
        return self._settings

    async def resolve(
        self,
        video_id: str,
        season: str | None = None,
        episode: str | None = None,
    ) -> VideoRecord:
        self._metrics.resolution.requests += 1
        await self._validate(video_id)
        try:
            return await self._resolve(
                video_id, season, episode, retry=self._settings.auto_retry
            )
        except (ExtractionFailed, UpstreamError) as exc:
            self._metrics.resolution.failures += 1
            await self._activity.error(
                "Scraper", f"Failed to resolve video ID {video_id}: {exc}"
            )
            raise

    async def refresh(
        self,
        video_id: str,
        season: str | None = None,
        episode: str | None = None,
    ) -> VideoRecord:
        """Force a re-extraction, bypassing both cache and record store."""
        await self._validate(video_id)
        key = build_cache_key(video_id, season, episode)
        self._cache.invalidate(key)
        existing = await self._store.get_video(key)
        try:
            record = await self._extract_and_store(
                video_id, season, episode, existing, self._settings
            )
        except (ExtractionFailed, UpstreamError) as exc:
            self._metrics.resolution.failures += 1
            await self._activity.error(
                "Scraper", f"Failed to refresh video ID {video_id}: {exc}"
            )
            raise
        await self._activity.info("Cache", f"Refreshed cache for video ID: {video_id}")
        return record

    async def clear_cache(self) -> int:
        """Drop the resolution cache and mark every stored record stale.

        Records stay in the store; the next resolve of each one extracts
        again and updates it in place.
        """
        removed = self._cache.clear()
        self._cleared_at = utcnow()
        await self._activity.info("Cache", "Video cache cleared")
        return removed

    async def update_settings(self, **changes: Any) -> ScraperSettings:
        """Validate, persist and apply a partial settings update.

        Raises:
            ValueError: If any value is out of range or of the wrong type.
        """
        updated = self._settings.merged(**changes)
        await self._store.save_settings(updated)
        self._settings = updated
        log.info("scraper_settings_updated", **updated.to_dict())
        await self._activity.info("Scraper", "Settings updated")
        return updated

    async def _validate(self, video_id: str) -> None:
        if not VIDEO_ID_RE.match(video_id):
            await self._activity.error("Scraper", f"Invalid video ID format: {video_id}")
            raise InvalidVideoId(video_id)

    async def _resolve(
        self,
        video_id: str,
        season: str | None,
        episode: str | None,
        *,
        retry: bool,
    ) -> VideoRecord:
        settings = self._settings
        key = build_cache_key(video_id, season, episode)

        if settings.cache_enabled:
            cached = self._cache.get(key)
            if cached is not None:
                self._metrics.resolution.cache_hits += 1
                await self._activity.info("Cache", f"Cache hit for video ID: {video_id}")
                return cached

        stored = await self._store.get_video(key)
        if stored is not None and not self._is_stale(stored):
            record = await self._store.increment_access_count(key) or stored
            self._metrics.resolution.store_hits += 1
            if settings.cache_enabled:
                self._cache.set(key, record, settings.cache_ttl)
            log.debug("record_store_hit", key=key, access_count=record.access_count)
            return record

        await self._activity.info(
            "Cache", f"Cache miss for video ID: {video_id}, initiating scraper"
        )
        try:
            return await self._extract_and_store(
                video_id, season, episode, stored, settings
            )
        except (ExtractionFailed, UpstreamError) as exc:
            if not retry:
                raise
            self._metrics.resolution.retries += 1
            await self._activity.warn(
                "Scraper",
                f"Error scraping video {video_id}: {exc}. Auto-retry enabled, retrying",
            )
            await self._extractor.reset()
            return await self._resolve(video_id, season, episode, retry=False)

    async def _extract_and_store(
        self,
        video_id: str,
        season: str | None,
        episode: str | None,
        existing: VideoRecord | None,
        settings: ScraperSettings,
    ) -> VideoRecord:
        started = time.perf_counter_ns()
        try:
            extracted = await self._extractor.extract(
                video_id, season, episode, timeout=float(settings.timeout)
            )
        finally:
            self._metrics.record_extraction(time.perf_counter_ns() - started)

        if existing is not None:
            record = existing.refreshed(extracted)
        else:
            record = VideoRecord.from_extraction(
                video_id, extracted, season=season, episode=episode
            )
        if settings.cache_enabled:
            self._cache.set(record.cache_key, record, settings.cache_ttl)
        await self._store.save_video(record)
        await self._activity.info(
            "Scraper", f"Resolved video ID {video_id}: {record.title}"
        )
        return record

    def _is_stale(self, record: VideoRecord) -> bool:
        if self._cleared_at is not None and record.resolved_at <= self._cleared_at:
            log.debug("stored_record_predates_clear", key=record.cache_key)
            return True
        if not self._revalidate:
            return False
        if signed_url_expired(record.url, self._wall_clock()):
            log.info("stored_url_expired", key=record.cache_key)
            return True
        return False
