"""Port for embed page extraction."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from woviex.domain.entities.video import ExtractedVideo


@runtime_checkable
class VideoExtractorPort(Protocol):
    """Turns a video id into a direct media URL by scraping its embed page.

    Raises ``UpstreamError`` when the source cannot be fetched and
    ``ExtractionFailed`` when no media URL is found.
    """

    async def extract(
        self,
        video_id: str,
        season: str | None = None,
        episode: str | None = None,
        *,
        timeout: float,
    ) -> ExtractedVideo: ...

    async def reset(self) -> None:
        """Drop and recreate the underlying HTTP session."""
        ...

    async def aclose(self) -> None: ...
