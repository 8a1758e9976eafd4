"""Zero-impact in-memory runtime metrics.

All counters are plain Python integers mutated from the single-threaded
event loop, without locks or I/O.  ``time.perf_counter_ns()`` is used for
timing.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class ResolutionStats:
    """Outcome counters for VideoResolver.resolve()."""

    requests: int = 0
    cache_hits: int = 0
    store_hits: int = 0
    extractions: int = 0
    retries: int = 0
    failures: int = 0
    total_extraction_ns: int = 0

    def snapshot(self) -> dict[str, object]:
        avg_ms = (
            round(self.total_extraction_ns / self.extractions / 1_000_000, 1)
            if self.extractions
            else 0.0
        )
        hit_rate = (
            round(self.cache_hits / self.requests, 4) if self.requests else 0.0
        )
        return {
            "requests": self.requests,
            "cache_hits": self.cache_hits,
            "store_hits": self.store_hits,
            "extractions": self.extractions,
            "retries": self.retries,
            "failures": self.failures,
            "cache_hit_rate": hit_rate,
            "avg_extraction_ms": avg_ms,
        }


@dataclass
class StreamStats:
    """Counters for the /stream proxy."""

    requests: int = 0
    partial: int = 0
    invalid_tokens: int = 0
    upstream_errors: int = 0

    def snapshot(self) -> dict[str, object]:
        return {
            "requests": self.requests,
            "partial": self.partial,
            "invalid_tokens": self.invalid_tokens,
            "upstream_errors": self.upstream_errors,
        }


@dataclass
class MetricsCollector:
    """Central in-memory metrics collector."""

    resolution: ResolutionStats = field(default_factory=ResolutionStats)
    stream: StreamStats = field(default_factory=StreamStats)
    _start_ns: int = field(default_factory=time.perf_counter_ns)

    def record_extraction(self, duration_ns: int) -> None:
        """Record one extraction attempt (successful or not)."""
        self.resolution.extractions += 1
        self.resolution.total_extraction_ns += duration_ns

    def snapshot(self) -> dict[str, object]:
        uptime_s = round((time.perf_counter_ns() - self._start_ns) / 1_000_000_000, 1)
        return {
            "uptime_seconds": uptime_s,
            "resolution": self.resolution.snapshot(),
            "stream": self.stream.snapshot(),
        }
