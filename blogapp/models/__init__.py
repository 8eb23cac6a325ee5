from .blog import BlogRecord

__all__ = [
    "BlogRecord",
]
