"""
Blog store interface shared by the in-memory and database backends.
"""
from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..errors import ValidationError
from ..logging_config import storage_logger, store_logger
from ..schemas.blog import Blog, BlogCreate, BlogDateCount, BlogUpdate, BlogsPage
from ..services.pagination import compute_page_window, total_pages
from ..services.reactions import ReactionAction
from ..storage.images import ImageStorage


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """Current time, strictly after ``previous``."""
    now = utcnow()
    if previous is not None:
        if previous.tzinfo is None:
            previous = previous.replace(tzinfo=timezone.utc)
        if now <= previous:
            return previous + timedelta(microseconds=1)
    return now


def require_text(value: Optional[str], field_name: str) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} is required", field=field_name)


def validate_create(data: BlogCreate) -> None:
    require_text(data.title, "title")
    require_text(data.content, "content")


def validate_update(data: BlogUpdate) -> dict:
    """Return only the fields the caller set, rejecting blank text."""
    changes = data.model_dump(exclude_unset=True)
    for field_name in ("title", "content"):
        if field_name in changes:
            require_text(changes[field_name], field_name)
    if "is_good" in changes and changes["is_good"] is None:
        raise ValidationError("is_good cannot be null", field="is_good")
    return changes


class BlogsRepository(ABC):
    """Owns the canonical set of blogs. Callers only ever get copies."""

    def __init__(self, image_storage: Optional[ImageStorage] = None):
        self.image_storage = image_storage

    @abstractmethod
    def list_blogs(self) -> List[Blog]:
        """All blogs, newest first."""

    @abstractmethod
    def list_page(self, page, page_size) -> BlogsPage:
        """One page window of ``list_blogs``."""

    @abstractmethod
    def get_by_id(self, blog_id: str) -> Optional[Blog]:
        pass

    @abstractmethod
    def create(self, data: BlogCreate) -> Blog:
        pass

    @abstractmethod
    def update(self, blog_id: str, data: BlogUpdate) -> Blog:
        pass

    @abstractmethod
    def delete(self, blog_id: str) -> bool:
        pass

    @abstractmethod
    def react(self, blog_id: str, action: ReactionAction) -> Blog:
        """Apply a reaction atomically against the stored blog."""

    def like(self, blog_id: str) -> Blog:
        return self.react(blog_id, ReactionAction.LIKE)

    def dislike(self, blog_id: str) -> Blog:
        return self.react(blog_id, ReactionAction.DISLIKE)

    def toggle_good(self, blog_id: str) -> Blog:
        return self.react(blog_id, ReactionAction.TOGGLE)

    def blog_dates(self) -> List[BlogDateCount]:
        """Number of blogs created per UTC day, most recent day first."""
        counts = Counter(blog.created_at.astimezone(timezone.utc).date() for blog in self.list_blogs())
        return [
            BlogDateCount(day=day, count=count)
            for day, count in sorted(counts.items(), reverse=True)
        ]

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    @staticmethod
    def _page_from(items: List[Blog], total_count: int, page, page_size) -> BlogsPage:
        window = compute_page_window(page, page_size)
        return BlogsPage(
            items=items,
            total_count=total_count,
            page=window.page,
            page_size=window.page_size,
            total_pages=total_pages(total_count, window.page_size),
        )

    def _release_image(self, previous_url: Optional[str], changes: dict) -> None:
        """Remove the stored image when an update cleared or replaced it."""
        if not previous_url or "image_url" not in changes:
            return
        if changes["image_url"] == previous_url:
            return
        self._remove_image(previous_url)

    def _remove_image(self, url: Optional[str]) -> None:
        """Best effort: the blog change is already saved when this runs."""
        if self.image_storage is None or not url:
            return
        try:
            removed = self.image_storage.remove_by_url(url)
        except (ValueError, OSError) as e:
            storage_logger.error("Could not remove blog image", error=e, image_url=url)
            return
        if removed:
            store_logger.info("Released blog image", image_url=url)
