"""Record store backed by CachePort (memory or diskcache).

Values are stored as JSON strings under these keys (entries never
expire)::

    video:{cache_key}   one VideoRecord
    video:index         list of cache keys, oldest first
    domains             list of DomainRecord dicts
    log:{id}            one LogEntry; ids below counter:log_head are trimmed
    settings            ScraperSettings dict
    counter:{name}      id sequences for domains and log entries, plus
                        log_head, the oldest live log id

Every video/domain/settings mutation is also handed to the mirror side
channel (keyed like ``video:{key}``), fire-and-forget.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog

from woviex.domain.entities.admin import (
    DomainRecord,
    LogEntry,
    LogLevel,
    ScraperSettings,
)
from woviex.domain.entities.video import VideoRecord, utcnow
from woviex.domain.exceptions import RecordNotFound
from woviex.domain.ports.cache import CachePort
from woviex.domain.ports.mirror import MirrorPort

log = structlog.get_logger(__name__)

_VIDEO_INDEX = "video:index"
_DOMAINS = "domains"
_LOG_COUNTER = "log"
_LOG_HEAD = "counter:log_head"
_SETTINGS = "settings"


def _video_key(key: str) -> str:
    return f"video:{key}"


def _log_key(entry_id: int) -> str:
    return f"log:{entry_id}"


def normalize_domain(domain: str) -> str:
    """Lower-case host part, without scheme, path or port."""
    host = domain.strip().lower()
    if "://" in host:
        host = host.split("://", 1)[1]
    host = host.split("/", 1)[0]
    return host.split(":", 1)[0]


class CacheRecordStore:
    """Implements RecordStorePort over any CachePort backend."""

    def __init__(
        self,
        cache: CachePort,
        mirror: MirrorPort | None = None,
        *,
        max_log_entries: int = 5000,
    ) -> None:
        self.cache = cache
        self._mirror = mirror
        self._max_log_entries = max_log_entries
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _load(self, key: str, default: Any) -> Any:
        raw = await self.cache.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            log.error("record_store_deserialize_error", key=key, error=str(e))
            return default

    async def _dump(self, key: str, value: Any) -> None:
        await self.cache.set(key, json.dumps(value), ttl=0)

    async def _next_id(self, name: str) -> int:
        current = await self._load(f"counter:{name}", 0)
        await self._dump(f"counter:{name}", current + 1)
        return current + 1

    def _publish(self, kind: str, payload: dict[str, Any]) -> None:
        if self._mirror is not None:
            self._mirror.publish(kind, payload)

    # ------------------------------------------------------------------
    # videos
    # ------------------------------------------------------------------

    async def get_video(self, key: str) -> VideoRecord | None:
        data = await self._load(_video_key(key), None)
        if data is None:
            return None
        try:
            return VideoRecord.from_dict(data)
        except (KeyError, ValueError) as e:
            log.error("video_record_invalid", key=key, error=str(e))
            return None

    async def save_video(self, record: VideoRecord) -> None:
        """Insert or update in place (last write wins)."""
        key = record.cache_key
        async with self._lock:
            index: list[str] = await self._load(_VIDEO_INDEX, [])
            if key in index:
                index.remove(key)
            index.append(key)
            await self._dump(_video_key(key), record.to_dict())
            await self._dump(_VIDEO_INDEX, index)
        log.debug("video_record_saved", key=key, access_count=record.access_count)
        self._publish(f"video:{key}", record.to_dict())

    async def increment_access_count(self, key: str) -> VideoRecord | None:
        async with self._lock:
            record = await self.get_video(key)
            if record is None:
                return None
            record = record.accessed()
            await self._dump(_video_key(key), record.to_dict())
        return record

    async def list_videos(self) -> list[VideoRecord]:
        index: list[str] = await self._load(_VIDEO_INDEX, [])
        records = [await self.get_video(key) for key in index]
        return [r for r in records if r is not None]

    async def list_recent_videos(self, limit: int = 10) -> list[VideoRecord]:
        videos = await self.list_videos()
        videos.sort(key=lambda r: r.last_accessed, reverse=True)
        return videos[: max(limit, 0)]

    # ------------------------------------------------------------------
    # domains
    # ------------------------------------------------------------------

    async def list_domains(self) -> list[DomainRecord]:
        return [DomainRecord.from_dict(d) for d in await self._load(_DOMAINS, [])]

    async def seed_domains(self, domains: list[str]) -> None:
        """Populate the whitelist on first start only."""
        if await self.cache.exists(_DOMAINS):
            return
        for domain in domains:
            await self.add_domain(domain)
        log.info("domains_seeded", count=len(domains))

    async def add_domain(self, domain: str) -> DomainRecord:
        name = normalize_domain(domain)
        if not name:
            raise ValueError("Domain is required")
        async with self._lock:
            items = await self._load(_DOMAINS, [])
            record = DomainRecord(
                id=await self._next_id("domain"),
                domain=name,
                active=True,
                added_at=utcnow(),
            )
            items.append(record.to_dict())
            await self._dump(_DOMAINS, items)
        self._publish(f"domain:{record.id}", record.to_dict())
        return record

    async def toggle_domain(self, domain_id: int) -> DomainRecord:
        async with self._lock:
            items = await self._load(_DOMAINS, [])
            for i, item in enumerate(items):
                if int(item["id"]) == domain_id:
                    item["active"] = not item.get("active", True)
                    items[i] = item
                    await self._dump(_DOMAINS, items)
                    record = DomainRecord.from_dict(item)
                    break
            else:
                raise RecordNotFound(f"Domain not found: {domain_id}")
        self._publish(f"domain:{record.id}", record.to_dict())
        return record

    async def delete_domain(self, domain_id: int) -> None:
        async with self._lock:
            items = await self._load(_DOMAINS, [])
            kept = [d for d in items if int(d["id"]) != domain_id]
            if len(kept) == len(items):
                raise RecordNotFound(f"Domain not found: {domain_id}")
            await self._dump(_DOMAINS, kept)
        self._publish(f"domain:{domain_id}", {"id": domain_id, "deleted": True})

    async def is_domain_whitelisted(self, domain: str) -> bool:
        name = normalize_domain(domain)
        return any(d.active and d.domain == name for d in await self.list_domains())

    # ------------------------------------------------------------------
    # logs
    # ------------------------------------------------------------------

    async def _log_bounds(self) -> tuple[int, int]:
        """Oldest live log id and newest id (empty when head > tail)."""
        head = await self._load(_LOG_HEAD, 1)
        tail = await self._load(f"counter:{_LOG_COUNTER}", 0)
        return head, tail

    async def _load_log(self, entry_id: int) -> LogEntry | None:
        data = await self._load(_log_key(entry_id), None)
        return LogEntry.from_dict(data) if data is not None else None

    async def append_log(self, level: LogLevel, source: str, message: str) -> LogEntry:
        """Write one entry under its own key and drop the oldest past the cap."""
        async with self._lock:
            entry = LogEntry(
                id=await self._next_id(_LOG_COUNTER),
                timestamp=utcnow(),
                level=level,
                source=source,
                message=message,
            )
            await self._dump(_log_key(entry.id), entry.to_dict())

            head = await self._load(_LOG_HEAD, 1)
            trimmed = head
            while entry.id - trimmed + 1 > self._max_log_entries:
                await self.cache.delete(_log_key(trimmed))
                trimmed += 1
            if trimmed != head:
                await self._dump(_LOG_HEAD, trimmed)
        return entry

    async def list_logs(
        self,
        limit: int = 20,
        offset: int = 0,
        level: LogLevel | None = None,
    ) -> tuple[list[LogEntry], int]:
        """Newest first; ``total`` counts entries after the level filter.

        Without a filter only the requested window is read.
        """
        head, tail = await self._log_bounds()
        offset, limit = max(offset, 0), max(limit, 0)

        if level is None:
            total = max(tail - head + 1, 0)
            first = tail - offset
            ids = range(first, max(first - limit, head - 1), -1)
            entries = [await self._load_log(i) for i in ids]
            return [e for e in entries if e is not None], total

        window: list[LogEntry] = []
        total = 0
        for entry_id in range(tail, head - 1, -1):
            entry = await self._load_log(entry_id)
            if entry is None or entry.level != level:
                continue
            if offset <= total < offset + limit:
                window.append(entry)
            total += 1
        return window, total

    async def clear_logs(self) -> None:
        async with self._lock:
            head, tail = await self._log_bounds()
            for entry_id in range(head, tail + 1):
                await self.cache.delete(_log_key(entry_id))
            await self._dump(_LOG_HEAD, tail + 1)
        await self.append_log("INFO", "System", "Logs have been cleared")

    # ------------------------------------------------------------------
    # settings
    # ------------------------------------------------------------------

    async def get_settings(self) -> ScraperSettings | None:
        data = await self._load(_SETTINGS, None)
        if data is None:
            return None
        try:
            return ScraperSettings.from_dict(data)
        except ValueError as e:
            log.error("settings_record_invalid", error=str(e))
            return None

    async def save_settings(self, settings: ScraperSettings) -> None:
        await self._dump(_SETTINGS, settings.to_dict())
        self._publish("settings", settings.to_dict())
