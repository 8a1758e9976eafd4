"""Domain exceptions for video resolution, streaming and admin access."""

from __future__ import annotations


class WoviexError(Exception):
    """Base class for all domain errors."""


class InvalidVideoId(WoviexError):
    """Raised when a video id does not match the numeric id pattern."""

    def __init__(self, video_id: str) -> None:
        super().__init__(f"Invalid video ID format: {video_id!r}")
        self.video_id = video_id


class UpstreamError(WoviexError):
    """Raised when the embed source is unreachable or answers non-2xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExtractionFailed(WoviexError):
    """Raised when no heuristic located a media URL in the embed page."""


class InvalidToken(WoviexError):
    """Raised when a stream token is malformed, tampered or foreign."""


class Unauthorized(WoviexError):
    """Raised when an admin bearer token is missing or invalid."""


class RecordNotFound(WoviexError):
    """Raised when a record store lookup by id finds nothing."""


class RangeNotSatisfiable(WoviexError):
    """Raised when a byte range lies outside the upstream resource."""

    def __init__(self, total: int) -> None:
        super().__init__(f"Range not satisfiable for length {total}")
        self.total = total
