"""
Blog API Health Check Routes
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..dependencies import get_blogs_repository
from ..errors import BlogError
from ..repositories import BlogsRepository

router = APIRouter(prefix="/api/health", tags=["health"])

START_TIME = datetime.now(timezone.utc)


def get_uptime() -> str:
    """Get service uptime as human-readable string"""
    delta = datetime.now(timezone.utc) - START_TIME
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if delta.days > 0:
        return f"{delta.days}d {hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    else:
        return f"{minutes}m {seconds}s"


def check_blog_store(repository: BlogsRepository) -> Dict[str, Any]:
    """Check the blog store answers a one-item page"""
    try:
        page = repository.list_page(1, 1)
    except BlogError as e:
        return {"status": "unhealthy", "error": e.message}
    return {
        "status": "healthy",
        "backend": type(repository).__name__,
        "blogs": page.total_count,
    }


def check_media(media_root: str) -> Dict[str, Any]:
    """Check the media directory is usable"""
    path = Path(media_root)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "path": str(path)}


@router.get("")
@router.get("/live")
def health_live(config: Settings = Depends(get_settings)):
    """Liveness probe - is the service running?"""
    return {
        "ok": True,
        "status": "alive",
        "environment": config.environment,
        "uptime": get_uptime(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
def health_ready(
    repository: BlogsRepository = Depends(get_blogs_repository),
    config: Settings = Depends(get_settings),
):
    """Readiness probe - checks the blog store and media storage."""
    store = check_blog_store(repository)
    media = check_media(config.media_root)
    all_healthy = store["status"] == "healthy" and media["status"] == "healthy"

    return {
        "ok": all_healthy,
        "status": "ready" if all_healthy else "not_ready",
        "checks": {
            "blog_store": store,
            "media": media,
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
