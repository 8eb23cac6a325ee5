from .auth import router as auth_router
from .health import router as health_router
from .images import router as images_router

__all__ = [
    "auth_router",
    "health_router",
    "images_router",
]
