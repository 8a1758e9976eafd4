"""Fixtures for end-to-end API tests.

The app is built with create_app() but the lifespan is not entered: the
state is wired by hand with real use cases over in-memory infrastructure
and a mocked extractor port.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from woviex.application.activity_log import ActivityLog
from woviex.application.origin_policy import OriginPolicy
from woviex.application.use_cases import VideoResolver
from woviex.domain.entities import ExtractedVideo
from woviex.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from woviex.infrastructure.cache.resolution_cache import ResolutionCache
from woviex.infrastructure.config import AppConfig
from woviex.infrastructure.metrics import MetricsCollector
from woviex.infrastructure.mirror.telegram import NullMirror
from woviex.infrastructure.persistence.record_store import CacheRecordStore
from woviex.infrastructure.security import AdminAuth, UrlVault
from woviex.interfaces.app import create_app

ADMIN_PASSWORD = "s3cret"
STREAM_MEDIA_URL = "https://media.example.com/films/42.mp4"


def make_app(extractor: AsyncMock, **config: Any) -> FastAPI:
    """Build the app with hand-wired state (no lifespan)."""
    app_config = AppConfig(**config)
    app = create_app(app_config)
    state = app.state

    cache = MemoryCacheAdapter()
    store = CacheRecordStore(cache, max_log_entries=100)
    activity = ActivityLog(store)
    metrics = MetricsCollector()

    state.cache = cache
    state.http_client = httpx.AsyncClient()
    state.store = store
    state.extractor = extractor
    state.mirror = NullMirror()
    state.resolution_cache = ResolutionCache()
    state.activity_log = activity
    state.metrics = metrics
    state.resolver = VideoResolver(
        extractor,
        state.resolution_cache,
        store,
        activity,
        metrics=metrics,
    )
    state.vault = UrlVault.from_secret("e2e-secret")
    state.admin_auth = AdminAuth(password=ADMIN_PASSWORD)
    state.origin_policy = OriginPolicy(
        store, enforce=app_config.security.enforce_origin_whitelist
    )
    return app


@pytest.fixture()
def stream_extractor() -> AsyncMock:
    extractor = AsyncMock()
    extractor.extract = AsyncMock(
        return_value=ExtractedVideo(
            title="Big Buck Bunny", url=STREAM_MEDIA_URL, quality="1080p"
        )
    )
    extractor.reset = AsyncMock()
    return extractor


@pytest.fixture()
def app_factory(stream_extractor: AsyncMock) -> Callable[..., FastAPI]:
    """Build further apps over the same extractor with config overrides."""
    return lambda **config: make_app(stream_extractor, **config)


@pytest.fixture()
def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest.fixture()
def app(stream_extractor: AsyncMock) -> FastAPI:
    return make_app(stream_extractor)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def auth_headers(client: TestClient) -> dict[str, str]:
    resp = client.post("/api/auth/login", json={"password": ADMIN_PASSWORD})
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}
