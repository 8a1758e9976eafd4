"""Activity log: persisted LogEntry lines mirrored to structlog."""

from __future__ import annotations

import structlog

from woviex.domain.entities.admin import LogEntry, LogLevel
from woviex.domain.ports.record_store import RecordStorePort

log = structlog.get_logger(__name__)

_STRUCTLOG_METHOD: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARN": "warning",
    "ERROR": "error",
}


class ActivityLog:
    """Writes admin-visible log entries to the record store.

    Every entry is also emitted as a structlog ``activity`` event so the
    process log and the admin log never disagree.
    """

    def __init__(self, store: RecordStorePort) -> None:
        self._store = store

    async def write(self, level: LogLevel, source: str, message: str) -> LogEntry:
        getattr(log, _STRUCTLOG_METHOD[level])(
            "activity", source=source, message=message
        )
        return await self._store.append_log(level, source, message)

    async def debug(self, source: str, message: str) -> LogEntry:
        return await self.write("DEBUG", source, message)

    async def info(self, source: str, message: str) -> LogEntry:
        return await self.write("INFO", source, message)

    async def warn(self, source: str, message: str) -> LogEntry:
        return await self.write("WARN", source, message)

    async def error(self, source: str, message: str) -> LogEntry:
        return await self.write("ERROR", source, message)
