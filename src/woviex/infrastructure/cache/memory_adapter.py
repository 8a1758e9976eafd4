"""In-process CachePort implementation (dict + monotonic expiry)."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Optional

import structlog

log = structlog.get_logger(__name__)


class MemoryCacheAdapter:
    """Process-local key-value store satisfying CachePort.

    Everything lives in a dict touched only from the event loop, so no
    locking is needed.  Contents are lost on restart.
    """

    def __init__(
        self,
        ttl_seconds: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = ttl_seconds
        self._clock = clock
        self._data: dict[str, tuple[Any, float | None]] = {}

    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        log.debug("memory_cache_closed", entries=len(self._data))

    def _live(self, key: str) -> tuple[Any, float | None] | None:
        item = self._data.get(key)
        if item is None:
            return None
        expires_at = item[1]
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return item

    async def get(self, key: str) -> Optional[Any]:
        item = self._live(key)
        return item[0] if item is not None else None

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expire = ttl if ttl is not None else self.default_ttl
        expires_at = self._clock() + expire if expire else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def clear(self) -> None:
        self._data.clear()
        log.warning("cache_cleared", backend="memory")
