"""Time-keyed in-memory cache of resolved videos."""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from woviex.domain.entities.video import VideoRecord

log = structlog.get_logger(__name__)


class _CacheEntry:
    """Time-bounded cache entry for a resolved video."""

    __slots__ = ("value", "expires_at")

    def __init__(self, value: VideoRecord, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at


class ResolutionCache:
    """Maps composite video keys to their last resolution result.

    Expiry is lazy: an entry is valid iff ``clock() < expires_at``, and an
    expired entry is evicted on the read that finds it.  The TTL is passed
    by the caller on every ``set`` so settings changes apply to new entries
    only.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> VideoRecord | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            self.misses += 1
            log.debug("resolution_cache_expired", key=key)
            return None
        self.hits += 1
        return entry.value

    def set(self, key: str, value: VideoRecord, ttl: int) -> None:
        self._entries[key] = _CacheEntry(value, self._clock() + ttl)
        log.debug("resolution_cache_set", key=key, ttl=ttl)

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and return how many were removed."""
        removed = len(self._entries)
        self._entries.clear()
        log.info("resolution_cache_cleared", removed=removed)
        return removed

    def stats(self) -> dict[str, int | float]:
        lookups = self.hits + self.misses
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": round(self.hits / lookups, 4) if lookups else 0.0,
        }
