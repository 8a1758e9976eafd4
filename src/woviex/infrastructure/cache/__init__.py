"""Cache infrastructure - record store backends and the resolution cache."""

from .cache_factory import create_cache
from .diskcache_adapter import DiskcacheAdapter
from .memory_adapter import MemoryCacheAdapter
from .resolution_cache import ResolutionCache

__all__ = [
    "DiskcacheAdapter",
    "MemoryCacheAdapter",
    "ResolutionCache",
    "create_cache",
]
