"""Shared test fixtures for the Woviex test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from woviex.application.activity_log import ActivityLog
from woviex.domain.entities import ExtractedVideo, VideoRecord
from woviex.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from woviex.infrastructure.persistence.record_store import CacheRecordStore
from woviex.infrastructure.security import UrlVault

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------

MEDIA_URL = "https://cdn.example.com/videos/42.mp4?signature=abc"


@pytest.fixture()
def extracted_video() -> ExtractedVideo:
    return ExtractedVideo(title="Big Buck Bunny", url=MEDIA_URL, quality="1080p")


@pytest.fixture()
def video_record(extracted_video: ExtractedVideo) -> VideoRecord:
    """VideoRecord with known timestamps."""
    now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    return VideoRecord.from_extraction("42", extracted_video, now=now)


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_cache() -> MemoryCacheAdapter:
    return MemoryCacheAdapter()


@pytest.fixture()
def store(memory_cache: MemoryCacheAdapter) -> CacheRecordStore:
    """Record store over the in-memory backend (no mirror)."""
    return CacheRecordStore(memory_cache, max_log_entries=100)


@pytest.fixture()
def activity_log(store: CacheRecordStore) -> ActivityLog:
    return ActivityLog(store)


@pytest.fixture()
def vault() -> UrlVault:
    return UrlVault.from_secret("test-secret")


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_extractor(extracted_video: ExtractedVideo) -> AsyncMock:
    """Mock VideoExtractorPort returning ``extracted_video``."""
    extractor = AsyncMock()
    extractor.extract = AsyncMock(return_value=extracted_video)
    extractor.reset = AsyncMock()
    extractor.aclose = AsyncMock()
    return extractor


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock(return_value=True)
    cache.exists = AsyncMock(return_value=False)
    cache.clear = AsyncMock()
    cache.aclose = AsyncMock()
    return cache
