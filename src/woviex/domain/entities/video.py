"""Domain entities for video resolution.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

VIDEO_ID_RE = re.compile(r"^\d+$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_cache_key(
    video_id: str,
    season: str | None = None,
    episode: str | None = None,
) -> str:
    """Composite key for a video (optionally scoped to season/episode).

    >>> build_cache_key("42")
    '42'
    >>> build_cache_key("42", "1", "3")
    '42_s1_e3'
    """
    key = video_id
    if season:
        key += f"_s{season}"
    if episode:
        key += f"_e{episode}"
    return key


@dataclass(frozen=True)
class ExtractedVideo:
    """Normalized result of a single extraction run."""

    title: str
    url: str
    quality: str = "HD"


@dataclass(frozen=True)
class VideoRecord:
    """A resolved video as persisted in the record store.

    ``url`` is the plaintext media URL; it is only ever handed to clients
    as an encrypted stream token.
    """

    video_id: str
    title: str
    url: str
    quality: str
    resolved_at: datetime
    last_accessed: datetime
    access_count: int = 0
    season: str | None = None
    episode: str | None = None

    @property
    def cache_key(self) -> str:
        return build_cache_key(self.video_id, self.season, self.episode)

    @classmethod
    def from_extraction(
        cls,
        video_id: str,
        extracted: ExtractedVideo,
        *,
        season: str | None = None,
        episode: str | None = None,
        now: datetime | None = None,
    ) -> VideoRecord:
        ts = now or utcnow()
        return cls(
            video_id=video_id,
            title=extracted.title,
            url=extracted.url,
            quality=extracted.quality,
            resolved_at=ts,
            last_accessed=ts,
            access_count=1,
            season=season,
            episode=episode,
        )

    def refreshed(self, extracted: ExtractedVideo, now: datetime | None = None) -> VideoRecord:
        """Update in place after a re-extraction (access count is kept)."""
        ts = now or utcnow()
        return replace(
            self,
            title=extracted.title,
            url=extracted.url,
            quality=extracted.quality,
            resolved_at=ts,
            last_accessed=ts,
            access_count=self.access_count + 1,
        )

    def accessed(self, now: datetime | None = None) -> VideoRecord:
        return replace(
            self,
            access_count=self.access_count + 1,
            last_accessed=now or utcnow(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "url": self.url,
            "quality": self.quality,
            "season": self.season,
            "episode": self.episode,
            "resolvedAt": self.resolved_at.isoformat(),
            "lastAccessed": self.last_accessed.isoformat(),
            "accessCount": self.access_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VideoRecord:
        return cls(
            video_id=str(data["videoId"]),
            title=data.get("title", ""),
            url=data["url"],
            quality=data.get("quality", "HD"),
            season=data.get("season"),
            episode=data.get("episode"),
            resolved_at=datetime.fromisoformat(data["resolvedAt"]),
            last_accessed=datetime.fromisoformat(data["lastAccessed"]),
            access_count=int(data.get("accessCount", 0)),
        )
