"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from woviex.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from woviex.application.activity_log import ActivityLog
    from woviex.application.origin_policy import OriginPolicy
    from woviex.application.use_cases import VideoResolver
    from woviex.domain.ports import (
        CachePort,
        MirrorPort,
        RecordStorePort,
        VideoExtractorPort,
    )
    from woviex.infrastructure.cache import ResolutionCache
    from woviex.infrastructure.metrics import MetricsCollector
    from woviex.infrastructure.security import AdminAuth, UrlVault


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient

    # Domain Ports
    store: RecordStorePort
    extractor: VideoExtractorPort
    mirror: MirrorPort

    # Resolution
    resolution_cache: ResolutionCache
    resolver: VideoResolver

    # Security
    vault: UrlVault
    admin_auth: AdminAuth
    origin_policy: OriginPolicy

    # Admin-visible activity log
    activity_log: ActivityLog

    # Metrics (zero-impact in-memory counters)
    metrics: MetricsCollector
