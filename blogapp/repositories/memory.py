"""
In-process blog store.
"""
import itertools
import threading
import uuid
from typing import Dict, List, Optional

from ..errors import NotFound
from ..logging_config import store_logger
from ..schemas.blog import Blog, BlogCreate, BlogUpdate, BlogsPage
from ..services.pagination import compute_page_window
from ..services.reactions import ReactionAction, ReactionState, apply_reaction
from ..storage.images import ImageStorage
from .base import BlogsRepository, next_timestamp, utcnow, validate_create, validate_update

# Listed in display order, newest first
DEMO_BLOGS = [
    {
        "title": "Second Post",
        "content": "Use this project to experiment with GraphQL and a database backend later on.",
    },
    {
        "title": "Welcome to your Blog",
        "content": "This is your first post. You can create, edit, delete, like and dislike posts.",
    },
]


class MemoryBlogsRepository(BlogsRepository):
    """
    Blogs held in a dict guarded by a lock.

    Every read-modify-write happens under the lock, so reactions on the same
    blog never interleave when resolvers call the store from thread-pool
    workers.
    """

    def __init__(self, image_storage: Optional[ImageStorage] = None, seed_demo: bool = False):
        super().__init__(image_storage)
        self._lock = threading.Lock()
        self._blogs: Dict[str, Blog] = {}
        self._order: Dict[str, int] = {}
        self._sequence = itertools.count()

        if seed_demo:
            for demo in reversed(DEMO_BLOGS):
                self.create(BlogCreate(**demo))

    def _sorted(self) -> List[Blog]:
        return sorted(
            self._blogs.values(),
            key=lambda blog: (blog.created_at, self._order[blog.id]),
            reverse=True,
        )

    def _get_or_raise(self, blog_id: str) -> Blog:
        blog = self._blogs.get(blog_id)
        if blog is None:
            raise NotFound("Blog", blog_id)
        return blog

    def list_blogs(self) -> List[Blog]:
        with self._lock:
            return self._sorted()

    def list_page(self, page, page_size) -> BlogsPage:
        window = compute_page_window(page, page_size)
        with self._lock:
            ordered = self._sorted()
        return self._page_from(ordered[window.start:window.stop], len(ordered), page, page_size)

    def get_by_id(self, blog_id: str) -> Optional[Blog]:
        with self._lock:
            return self._blogs.get(blog_id)

    def create(self, data: BlogCreate) -> Blog:
        validate_create(data)
        now = utcnow()
        blog = Blog(
            id=str(uuid.uuid4()),
            title=data.title,
            content=data.content,
            image_url=data.image_url,
            is_good=False,
            likes_count=0,
            dislikes_count=0,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._blogs[blog.id] = blog
            self._order[blog.id] = next(self._sequence)

        store_logger.info("Created blog", blog_id=blog.id, backend="memory")
        return blog

    def update(self, blog_id: str, data: BlogUpdate) -> Blog:
        changes = validate_update(data)
        with self._lock:
            existing = self._get_or_raise(blog_id)
            updated = existing.model_copy(
                update={**changes, "updated_at": next_timestamp(existing.updated_at)}
            )
            self._blogs[blog_id] = updated

        self._release_image(existing.image_url, changes)
        store_logger.info("Updated blog", blog_id=blog_id, fields=sorted(changes), backend="memory")
        return updated

    def delete(self, blog_id: str) -> bool:
        with self._lock:
            removed = self._blogs.pop(blog_id, None)
            self._order.pop(blog_id, None)

        if removed is None:
            return False

        self._remove_image(removed.image_url)
        store_logger.info("Deleted blog", blog_id=blog_id, backend="memory")
        return True

    def react(self, blog_id: str, action: ReactionAction) -> Blog:
        with self._lock:
            existing = self._get_or_raise(blog_id)
            current = ReactionState(existing.is_good, existing.likes_count, existing.dislikes_count)
            state = apply_reaction(current, action)
            if state == current:
                return existing

            updated = existing.model_copy(update={
                "is_good": state.is_good,
                "likes_count": state.likes_count,
                "dislikes_count": state.dislikes_count,
                "updated_at": next_timestamp(existing.updated_at),
            })
            self._blogs[blog_id] = updated

        store_logger.info("Applied reaction", blog_id=blog_id, action=ReactionAction(action).value, backend="memory")
        return updated
