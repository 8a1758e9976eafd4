from .admin import DomainRecord, LogEntry, LogLevel, ScraperSettings
from .video import ExtractedVideo, VideoRecord, build_cache_key

__all__ = [
    "DomainRecord",
    "ExtractedVideo",
    "LogEntry",
    "LogLevel",
    "ScraperSettings",
    "VideoRecord",
    "build_cache_key",
]
