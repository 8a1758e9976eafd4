from .resolve_video import VideoResolver

__all__ = ["VideoResolver"]
