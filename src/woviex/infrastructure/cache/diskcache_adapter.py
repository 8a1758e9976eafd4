"""Diskcache backend: durable, SQLite-backed storage for the record store."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional, TypeVar

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)

T = TypeVar("T")


class DiskcacheAdapter:
    """CachePort over ``diskcache.Cache``.

    diskcache is synchronous, so every call runs in a worker thread; a
    semaphore caps concurrent SQLite access.  Records written by the
    store use ``ttl=0`` and therefore never expire, which is what makes
    videos, domains, logs and settings survive a restart.
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/woviex",
        ttl_seconds: int = 0,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_seconds
        self._db: DiskCache | None = None
        self._slots = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._db is None:
            self._db = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info(
                "record_db_opened",
                path=str(self.directory),
                entries=await asyncio.to_thread(len, self._db),
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        db, self._db = self._db, None
        if db is not None:
            await asyncio.to_thread(db.close)
            log.info("record_db_closed", path=str(self.directory))

    async def _run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        async with self._slots:
            return await asyncio.to_thread(fn, *args, **kwargs)

    def _opened(self) -> DiskCache:
        if self._db is None:
            raise RuntimeError("DiskcacheAdapter used before 'async with' opened it")
        return self._db

    async def get(self, key: str) -> Optional[Any]:
        return await self._run(self._opened().get, key, default=None)

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expire = self.default_ttl if ttl is None else ttl
        await self._run(self._opened().set, key, value, expire=expire or None)

    async def delete(self, key: str) -> bool:
        if self._db is None:
            return False
        return bool(await self._run(self._db.delete, key))

    async def exists(self, key: str) -> bool:
        if self._db is None:
            return False
        # membership honours expiry
        return await self._run(self._db.__contains__, key)

    async def clear(self) -> None:
        if self._db is None:
            return
        removed = await self._run(self._db.clear)
        log.warning("record_db_cleared", path=str(self.directory), removed=removed)
