from .cache import CachePort
from .mirror import MirrorPort
from .record_store import RecordStorePort
from .video_extractor import VideoExtractorPort

__all__ = [
    "CachePort",
    "MirrorPort",
    "RecordStorePort",
    "VideoExtractorPort",
]
