from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..config import Settings
from ..errors import BackendUnavailable
from ..logging_config import store_logger
from ..storage.images import ImageStorage
from .base import BlogsRepository
from .memory import MemoryBlogsRepository
from .database import DatabaseBlogsRepository

BACKENDS = ("memory", "database")


def build_blogs_repository(settings: Settings, image_storage: Optional[ImageStorage] = None) -> BlogsRepository:
    """Pick the blog store named by ``BLOGAPP_BLOGS_REPOSITORY``."""
    backend = settings.blogs_repository

    if backend == "memory":
        store_logger.info("Using in-memory blog store", seed_demo=settings.seed_demo_blogs)
        return MemoryBlogsRepository(image_storage=image_storage, seed_demo=settings.seed_demo_blogs)

    if backend == "database":
        if not settings.database_url:
            raise BackendUnavailable(
                "BLOGAPP_DATABASE_URL (or DATABASE_URL) is required for the database blog store"
            )
        from ..database import Base, create_db_engine, create_session_factory

        try:
            engine = create_db_engine(settings.database_url)
            # In production, use migrations instead
            Base.metadata.create_all(bind=engine)
        except (SQLAlchemyError, ImportError) as e:
            store_logger.error("Could not reach the blog database", error=e)
            raise BackendUnavailable(f"Blog database unavailable: {e}") from e
        store_logger.info("Using database blog store", dialect=engine.dialect.name)
        return DatabaseBlogsRepository(create_session_factory(engine), image_storage=image_storage)

    raise BackendUnavailable(f"Unknown blog store '{backend}', expected one of {', '.join(BACKENDS)}")


__all__ = [
    "BlogsRepository",
    "MemoryBlogsRepository",
    "DatabaseBlogsRepository",
    "build_blogs_repository",
]
