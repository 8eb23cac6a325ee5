from .images import ImageStorage, LocalImageStorage

__all__ = ["ImageStorage", "LocalImageStorage"]
