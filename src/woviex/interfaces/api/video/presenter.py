"""Presentation of VideoRecords: plaintext URLs become stream links."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from woviex.domain.entities.video import VideoRecord
from woviex.infrastructure.security import UrlVault


def base_url(request: Request, public_base_url: str | None) -> str:
    """Absolute base for generated links (config override wins)."""
    return public_base_url or str(request.base_url).rstrip("/")


def stream_url(record: VideoRecord, vault: UrlVault, base: str) -> str:
    return f"{base}/stream/{vault.encrypt(record.url)}"


def present_video(record: VideoRecord, vault: UrlVault, base: str) -> dict[str, Any]:
    """Record as JSON with ``url`` replaced by an encrypted stream link."""
    data = record.to_dict()
    data["url"] = stream_url(record, vault, base)
    return data
