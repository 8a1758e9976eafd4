"""Cache factory - builds the record store backend from config."""

from __future__ import annotations

import structlog

from woviex.domain.ports.cache import CachePort
from woviex.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from woviex.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from woviex.infrastructure.config.schema import CacheBackend

log = structlog.get_logger(__name__)


def create_cache(
    backend: CacheBackend = "memory",
    *,
    directory: str = "./.cache/woviex",
    max_concurrent: int = 10,
) -> CachePort:
    """Create the CachePort adapter for *backend*.

    Raises:
        ValueError: If `backend` is unknown.
    """
    log.info(
        "cache_factory_create",
        backend=backend,
        directory=directory if backend == "diskcache" else None,
    )
    if backend == "memory":
        return MemoryCacheAdapter()
    if backend == "diskcache":
        return DiskcacheAdapter(directory=directory, max_concurrent=max_concurrent)
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'memory' or 'diskcache'."
    )
