"""
SQLAlchemy-backed blog store (Postgres in production, SQLite locally).

Each operation runs in its own transaction. Reactions are applied with a
compare-and-swap UPDATE so two overlapping read-modify-write cycles on the
same blog cannot both land.
"""
from contextlib import contextmanager
from datetime import timezone
from typing import Iterator, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import BackendUnavailable, NotFound
from ..logging_config import store_logger
from ..models.blog import BlogRecord
from ..schemas.blog import Blog, BlogCreate, BlogUpdate, BlogsPage
from ..services.pagination import compute_page_window
from ..services.reactions import ReactionAction, ReactionState, apply_reaction
from ..storage.images import ImageStorage
from .base import BlogsRepository, next_timestamp, utcnow, validate_create, validate_update

MAX_SWAP_ATTEMPTS = 5

ORDERING = (BlogRecord.created_at.desc(), BlogRecord.row_id.desc())


def record_to_blog(record: BlogRecord) -> Blog:
    """Convert a row to the public model; SQLite drops tzinfo on the way back."""
    created_at = record.created_at
    updated_at = record.updated_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)

    return Blog(
        id=record.id,
        title=record.title,
        content=record.content,
        is_good=record.is_good,
        likes_count=record.likes_count or 0,
        dislikes_count=record.dislikes_count or 0,
        image_url=record.image_url,
        created_at=created_at,
        updated_at=updated_at,
    )


class DatabaseBlogsRepository(BlogsRepository):
    def __init__(self, session_factory: sessionmaker, image_storage: Optional[ImageStorage] = None):
        super().__init__(image_storage)
        self.session_factory = session_factory

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        session = self.session_factory()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as e:
            store_logger.error("Database operation failed", error=e, operation=operation)
            raise BackendUnavailable(f"Database {operation} error: {e}") from e
        finally:
            session.close()

    def _find(self, session: Session, blog_id: str) -> Optional[BlogRecord]:
        return session.scalars(select(BlogRecord).where(BlogRecord.id == blog_id)).first()

    def list_blogs(self) -> List[Blog]:
        with self._transaction("list_blogs") as session:
            records = session.scalars(select(BlogRecord).order_by(*ORDERING)).all()
            return [record_to_blog(r) for r in records]

    def list_page(self, page, page_size) -> BlogsPage:
        window = compute_page_window(page, page_size)
        with self._transaction("list_page") as session:
            total_count = session.scalar(select(func.count()).select_from(BlogRecord)) or 0
            records = session.scalars(
                select(BlogRecord)
                .order_by(*ORDERING)
                .offset(window.start)
                .limit(window.page_size)
            ).all()
            items = [record_to_blog(r) for r in records]
        return self._page_from(items, total_count, page, page_size)

    def get_by_id(self, blog_id: str) -> Optional[Blog]:
        with self._transaction("get_by_id") as session:
            record = self._find(session, blog_id)
            return record_to_blog(record) if record else None

    def create(self, data: BlogCreate) -> Blog:
        validate_create(data)
        now = utcnow()
        with self._transaction("create") as session:
            record = BlogRecord(
                title=data.title,
                content=data.content,
                image_url=data.image_url,
                is_good=False,
                likes_count=0,
                dislikes_count=0,
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            session.flush()
            blog = record_to_blog(record)

        store_logger.info("Created blog", blog_id=blog.id, backend="database")
        return blog

    def update(self, blog_id: str, data: BlogUpdate) -> Blog:
        changes = validate_update(data)
        with self._transaction("update") as session:
            record = session.scalars(
                select(BlogRecord).where(BlogRecord.id == blog_id).with_for_update()
            ).first()
            if record is None:
                raise NotFound("Blog", blog_id)

            previous_image_url = record.image_url
            for key, value in changes.items():
                setattr(record, key, value)
            record.updated_at = next_timestamp(record.updated_at)
            session.flush()
            blog = record_to_blog(record)

        self._release_image(previous_image_url, changes)
        store_logger.info("Updated blog", blog_id=blog_id, fields=sorted(changes), backend="database")
        return blog

    def delete(self, blog_id: str) -> bool:
        with self._transaction("delete") as session:
            image_url = session.scalar(select(BlogRecord.image_url).where(BlogRecord.id == blog_id))
            result = session.execute(delete(BlogRecord).where(BlogRecord.id == blog_id))
            removed = result.rowcount > 0

        if not removed:
            return False

        self._remove_image(image_url)
        store_logger.info("Deleted blog", blog_id=blog_id, backend="database")
        return True

    def _read_state(self, blog_id: str) -> BlogRecord:
        with self._transaction("react") as session:
            record = self._find(session, blog_id)
            if record is None:
                raise NotFound("Blog", blog_id)
            return record

    def _swap(self, blog_id: str, expected: ReactionState, read_at, state: ReactionState, updated_at) -> bool:
        """Write ``state`` only if the row still matches what was read at ``read_at``."""
        with self._transaction("react") as session:
            result = session.execute(
                update(BlogRecord)
                .where(
                    BlogRecord.id == blog_id,
                    BlogRecord.is_good == expected.is_good,
                    BlogRecord.likes_count == expected.likes_count,
                    BlogRecord.dislikes_count == expected.dislikes_count,
                    BlogRecord.updated_at == read_at,
                )
                .values(
                    is_good=state.is_good,
                    likes_count=state.likes_count,
                    dislikes_count=state.dislikes_count,
                    updated_at=updated_at,
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def react(self, blog_id: str, action: ReactionAction) -> Blog:
        action = ReactionAction(action)
        for attempt in range(1, MAX_SWAP_ATTEMPTS + 1):
            record = self._read_state(blog_id)
            blog = record_to_blog(record)
            current = ReactionState(blog.is_good, blog.likes_count, blog.dislikes_count)
            state = apply_reaction(current, action)
            if state == current:
                return blog

            updated_at = next_timestamp(blog.updated_at)
            if self._swap(blog_id, current, record.updated_at, state, updated_at):
                store_logger.info(
                    "Applied reaction",
                    blog_id=blog_id,
                    action=action.value,
                    attempt=attempt,
                    backend="database",
                )
                return blog.model_copy(update={
                    "is_good": state.is_good,
                    "likes_count": state.likes_count,
                    "dislikes_count": state.dislikes_count,
                    "updated_at": updated_at,
                })

            store_logger.debug("Reaction lost a race, retrying", blog_id=blog_id, attempt=attempt)

        raise BackendUnavailable(
            f"Could not apply {action.value} to blog '{blog_id}' after {MAX_SWAP_ATTEMPTS} attempts"
        )
