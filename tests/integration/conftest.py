"""Shared fixtures for integration tests.

These tests use real infrastructure components (DiskcacheAdapter,
CacheRecordStore, load_config) instead of in-memory fakes.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from woviex.infrastructure.cache.diskcache_adapter import DiskcacheAdapter


@pytest.fixture()
async def diskcache(tmp_path: Path) -> DiskcacheAdapter:
    """Real DiskcacheAdapter backed by tmp_path (auto-cleaned)."""
    adapter = DiskcacheAdapter(directory=tmp_path / "cache", max_concurrent=5)
    async with adapter:
        yield adapter


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop config variables leaking in from the host environment."""
    bare = {
        "ADMIN_PASSWORD",
        "ADMIN_PASSWORD_HASH",
        "TELEGRAM_BOT_TOKEN",
        "TELEGRAM_CHANNEL_ID",
        "PUBLIC_URL",
    }
    for name in list(os.environ):
        if name.upper().startswith("WOVIEX_") or name in bare:
            monkeypatch.delenv(name, raising=False)
