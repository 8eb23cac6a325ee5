"""
GraphQL schema for blogs.

Resolvers are thin: they check the auth gate for mutations, call the blog
store, and turn domain errors into GraphQL error entries carrying an
``extensions.code``.
"""
from typing import Callable, List, Optional, TypeVar

import strawberry
from fastapi import Depends
from graphql import GraphQLError
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from ..auth import get_current_user, require_authenticated
from ..config import Settings, get_settings
from ..dependencies import get_blogs_repository
from ..errors import BlogError
from ..logging_config import api_logger
from ..repositories import BlogsRepository
from ..schemas import blog as schemas
from ..services.markdown import CodeBlock, split_markdown_blocks
from ..services.pagination import clamp_page

T = TypeVar("T")


# ============================================================
# TYPES
# ============================================================

@strawberry.type
class ContentBlock:
    kind: str
    language: Optional[str]
    text: str


@strawberry.type(name="Blog")
class BlogType:
    id: strawberry.ID
    title: str
    content: str
    is_good: bool
    likes_count: int
    dislikes_count: int
    image_url: Optional[str]
    created_at: str
    updated_at: str

    @strawberry.field(description="Content split into text runs and fenced code blocks")
    async def content_blocks(self) -> List[ContentBlock]:
        blocks = []
        for block in split_markdown_blocks(self.content):
            if isinstance(block, CodeBlock):
                blocks.append(ContentBlock(kind="code", language=block.language, text=block.text))
            else:
                blocks.append(ContentBlock(kind="text", language=None, text=block.text))
        return blocks


@strawberry.type(name="BlogsPage")
class BlogsPageType:
    items: List[BlogType]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    redirect_page: Optional[int] = strawberry.field(
        default=None,
        description="Last valid page when the requested page is past the end",
    )


@strawberry.type
class BlogDateCount:
    date: str
    count: int


@strawberry.input
class CreateBlogInput:
    title: str
    content: str
    image_url: Optional[str] = None


@strawberry.input
class UpdateBlogInput:
    title: Optional[str] = strawberry.UNSET
    content: Optional[str] = strawberry.UNSET
    is_good: Optional[bool] = strawberry.UNSET
    image_url: Optional[str] = strawberry.UNSET


def blog_to_type(blog: schemas.Blog) -> BlogType:
    return BlogType(
        id=strawberry.ID(blog.id),
        title=blog.title,
        content=blog.content,
        is_good=blog.is_good,
        likes_count=blog.likes_count,
        dislikes_count=blog.dislikes_count,
        image_url=blog.image_url,
        created_at=blog.created_at.isoformat(timespec="microseconds"),
        updated_at=blog.updated_at.isoformat(timespec="microseconds"),
    )


def update_input_to_schema(data: UpdateBlogInput) -> schemas.BlogUpdate:
    """Only fields the client actually sent; an explicit null imageUrl clears the image."""
    fields = {
        name: getattr(data, name)
        for name in ("title", "content", "is_good", "image_url")
        if getattr(data, name) is not strawberry.UNSET
    }
    return schemas.BlogUpdate(**fields)


# ============================================================
# RESOLVER HELPERS
# ============================================================

def _repository(info: Info) -> BlogsRepository:
    return info.context["repository"]


def _settings(info: Info) -> Settings:
    return info.context["settings"]


def _graphql_error(e: BlogError) -> GraphQLError:
    api_logger.warning(f"GraphQL operation failed: {e.message}", error_code=e.code)
    return GraphQLError(e.message, extensions={"code": e.code})


async def _run(operation: Callable[..., T], *args) -> T:
    """Call the blog store on the thread pool so the event loop stays free."""
    try:
        return await run_in_threadpool(operation, *args)
    except BlogError as e:
        raise _graphql_error(e) from e


def _check_auth(info: Info) -> None:
    try:
        require_authenticated(info.context["current_user"] is not None, _settings(info).require_auth)
    except BlogError as e:
        raise _graphql_error(e) from e


# ============================================================
# QUERIES & MUTATIONS
# ============================================================

@strawberry.type
class Query:
    @strawberry.field(description="All blogs, or one page of them when page/pageSize is given")
    async def blogs(
        self,
        info: Info,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> BlogsPageType:
        repository = _repository(info)

        if page is None and page_size is None:
            items = await _run(repository.list_blogs)
            return BlogsPageType(
                items=[blog_to_type(b) for b in items],
                total_count=len(items),
                page=1,
                page_size=max(len(items), 1),
                total_pages=1,
            )

        if page_size is None:
            page_size = _settings(info).blogs_page_size

        result = await _run(repository.list_page, page, page_size)
        last_page = clamp_page(result.page, result.total_count, result.page_size)
        return BlogsPageType(
            items=[blog_to_type(b) for b in result.items],
            total_count=result.total_count,
            page=result.page,
            page_size=result.page_size,
            total_pages=result.total_pages,
            redirect_page=last_page if last_page != result.page else None,
        )

    @strawberry.field
    async def blog(self, info: Info, id: strawberry.ID) -> Optional[BlogType]:
        blog = await _run(_repository(info).get_by_id, str(id))
        return blog_to_type(blog) if blog else None

    @strawberry.field(description="Number of blogs created per day, most recent first")
    async def blog_dates(self, info: Info) -> List[BlogDateCount]:
        return [
            BlogDateCount(date=entry.day.isoformat(), count=entry.count)
            for entry in await _run(_repository(info).blog_dates)
        ]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_blog(self, info: Info, input: CreateBlogInput) -> BlogType:
        _check_auth(info)
        data = schemas.BlogCreate(title=input.title, content=input.content, image_url=input.image_url)
        return blog_to_type(await _run(_repository(info).create, data))

    @strawberry.mutation
    async def update_blog(self, info: Info, id: strawberry.ID, input: UpdateBlogInput) -> BlogType:
        _check_auth(info)
        return blog_to_type(await _run(_repository(info).update, str(id), update_input_to_schema(input)))

    @strawberry.mutation
    async def delete_blog(self, info: Info, id: strawberry.ID) -> bool:
        _check_auth(info)
        return await _run(_repository(info).delete, str(id))

    @strawberry.mutation
    async def toggle_blog_good(self, info: Info, id: strawberry.ID) -> BlogType:
        _check_auth(info)
        return blog_to_type(await _run(_repository(info).toggle_good, str(id)))

    @strawberry.mutation
    async def like_blog(self, info: Info, id: strawberry.ID) -> BlogType:
        _check_auth(info)
        return blog_to_type(await _run(_repository(info).like, str(id)))

    @strawberry.mutation
    async def dislike_blog(self, info: Info, id: strawberry.ID) -> BlogType:
        _check_auth(info)
        return blog_to_type(await _run(_repository(info).dislike, str(id)))


schema = strawberry.Schema(query=Query, mutation=Mutation)


async def get_context(
    repository: BlogsRepository = Depends(get_blogs_repository),
    current_user: Optional[str] = Depends(get_current_user),
    config: Settings = Depends(get_settings),
) -> dict:
    return {
        "repository": repository,
        "current_user": current_user,
        "settings": config,
    }


def create_graphql_router(debug: bool = False) -> GraphQLRouter:
    return GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if debug else None,
    )
