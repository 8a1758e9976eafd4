"""Port for the persistent record store (videos, domains, logs, settings)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from woviex.domain.entities.admin import (
    DomainRecord,
    LogEntry,
    LogLevel,
    ScraperSettings,
)
from woviex.domain.entities.video import VideoRecord


@runtime_checkable
class RecordStorePort(Protocol):
    """Async interface for everything the admin surface persists.

    Videos are keyed by their composite cache key
    (``id`` or ``id_s{season}_e{episode}``).
    """

    # videos
    async def get_video(self, key: str) -> VideoRecord | None: ...

    async def save_video(self, record: VideoRecord) -> None: ...

    async def increment_access_count(self, key: str) -> VideoRecord | None: ...

    async def list_recent_videos(self, limit: int = 10) -> list[VideoRecord]: ...

    async def list_videos(self) -> list[VideoRecord]: ...

    # domains
    async def list_domains(self) -> list[DomainRecord]: ...

    async def add_domain(self, domain: str) -> DomainRecord: ...

    async def toggle_domain(self, domain_id: int) -> DomainRecord: ...

    async def delete_domain(self, domain_id: int) -> None: ...

    async def is_domain_whitelisted(self, domain: str) -> bool: ...

    # logs
    async def append_log(self, level: LogLevel, source: str, message: str) -> LogEntry: ...

    async def list_logs(
        self,
        limit: int = 20,
        offset: int = 0,
        level: LogLevel | None = None,
    ) -> tuple[list[LogEntry], int]: ...

    async def clear_logs(self) -> None: ...

    # settings
    async def get_settings(self) -> ScraperSettings | None: ...

    async def save_settings(self, settings: ScraperSettings) -> None: ...
