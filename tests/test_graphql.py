"""
Tests for the GraphQL endpoint.
"""
import asyncio
import threading

from blogapp.graphql import schema
from blogapp.schemas.blog import BlogCreate

BLOG_FIELDS = """
    id
    title
    content
    isGood
    likesCount
    dislikesCount
    imageUrl
    createdAt
    updatedAt
"""

CREATE_BLOG = f"""
mutation CreateBlog($input: CreateBlogInput!) {{
  createBlog(input: $input) {{ {BLOG_FIELDS} }}
}}
"""

GET_BLOGS_PAGE = f"""
query GetBlogs($page: Int, $pageSize: Int) {{
  blogs(page: $page, pageSize: $pageSize) {{
    items {{ {BLOG_FIELDS} }}
    totalCount
    page
    pageSize
    totalPages
    redirectPage
  }}
}}
"""

GET_BLOG = f"""
query GetBlog($id: ID!) {{
  blog(id: $id) {{ {BLOG_FIELDS} }}
}}
"""

UPDATE_BLOG = f"""
mutation UpdateBlog($id: ID!, $input: UpdateBlogInput!) {{
  updateBlog(id: $id, input: $input) {{ {BLOG_FIELDS} }}
}}
"""

DELETE_BLOG = """
mutation DeleteBlog($id: ID!) { deleteBlog(id: $id) }
"""

REACTION = """
mutation React($id: ID!) {{
  {name}(id: $id) {{ id isGood likesCount dislikesCount updatedAt }}
}}
"""


class TestQueries:
    def test_blogs_empty(self, graphql):
        data = graphql(GET_BLOGS_PAGE)["data"]["blogs"]
        assert data["items"] == []
        assert data["totalCount"] == 0
        assert data["totalPages"] == 1

    def test_blogs_without_arguments_returns_everything(self, graphql, repository):
        for i in range(12):
            repository.create(BlogCreate(title=f"Post {i}", content="Body"))

        data = graphql(GET_BLOGS_PAGE)["data"]["blogs"]
        assert len(data["items"]) == 12
        assert data["items"][0]["title"] == "Post 11"

    def test_blogs_paginated(self, graphql, repository):
        for i in range(25):
            repository.create(BlogCreate(title=f"Post {i}", content="Body"))

        first = graphql(GET_BLOGS_PAGE, {"page": 1, "pageSize": 10})["data"]["blogs"]
        last = graphql(GET_BLOGS_PAGE, {"page": 3, "pageSize": 10})["data"]["blogs"]

        assert len(first["items"]) == 10
        assert first["totalCount"] == 25
        assert first["totalPages"] == 3
        assert first["redirectPage"] is None
        assert len(last["items"]) == 5
        assert last["items"][-1]["title"] == "Post 0"

    def test_page_size_defaults_to_setting(self, graphql, repository, settings):
        settings.blogs_page_size = 4
        for i in range(6):
            repository.create(BlogCreate(title=f"Post {i}", content="Body"))

        data = graphql(GET_BLOGS_PAGE, {"page": 2})["data"]["blogs"]
        assert data["pageSize"] == 4
        assert len(data["items"]) == 2

    def test_page_past_the_end_reports_redirect(self, graphql, repository):
        for i in range(3):
            repository.create(BlogCreate(title=f"Post {i}", content="Body"))

        data = graphql(GET_BLOGS_PAGE, {"page": 9, "pageSize": 2})["data"]["blogs"]
        assert data["items"] == []
        assert data["redirectPage"] == 2

    def test_blog_by_id(self, graphql, repository):
        blog = repository.create(BlogCreate(title="Hello", content="World"))
        data = graphql(GET_BLOG, {"id": blog.id})["data"]["blog"]
        assert data["title"] == "Hello"
        assert data["createdAt"] == data["updatedAt"]

    def test_blog_missing_is_null(self, graphql):
        body = graphql(GET_BLOG, {"id": "missing"})
        assert body["data"]["blog"] is None
        assert "errors" not in body

    def test_content_blocks(self, graphql, repository):
        blog = repository.create(BlogCreate(title="Code", content="Intro\n```python\nx = 1\n```"))
        body = graphql(
            "query($id: ID!) { blog(id: $id) { contentBlocks { kind language text } } }",
            {"id": blog.id},
        )
        assert body["data"]["blog"]["contentBlocks"] == [
            {"kind": "text", "language": None, "text": "Intro"},
            {"kind": "code", "language": "python", "text": "x = 1"},
        ]

    def test_blog_dates(self, graphql, repository):
        repository.create(BlogCreate(title="A", content="B"))
        repository.create(BlogCreate(title="C", content="D"))
        dates = graphql("{ blogDates { date count } }")["data"]["blogDates"]
        assert len(dates) == 1
        assert dates[0]["count"] == 2


class TestMutations:
    def test_create_blog(self, graphql, repository):
        body = graphql(CREATE_BLOG, {"input": {"title": "New", "content": "Post"}})
        blog = body["data"]["createBlog"]

        assert blog["title"] == "New"
        assert blog["isGood"] is False
        assert blog["likesCount"] == 0
        assert blog["imageUrl"] is None
        assert repository.get_by_id(blog["id"]) is not None

    def test_create_blog_with_blank_title(self, graphql, repository):
        body = graphql(CREATE_BLOG, {"input": {"title": "  ", "content": "Post"}})

        assert body["data"] is None
        assert body["errors"][0]["extensions"]["code"] == "VALIDATION_ERROR"
        assert repository.list_blogs() == []

    def test_update_blog_partial(self, graphql, repository):
        blog = repository.create(BlogCreate(title="Old", content="Body"))
        updated = graphql(UPDATE_BLOG, {"id": blog.id, "input": {"title": "X"}})["data"]["updateBlog"]

        assert updated["title"] == "X"
        assert updated["content"] == "Body"
        assert updated["isGood"] is False
        assert updated["updatedAt"] > updated["createdAt"]

    def test_update_blog_clears_image(self, graphql, repository):
        blog = repository.create(BlogCreate(title="T", content="C", image_url="https://example.com/a.png"))
        updated = graphql(UPDATE_BLOG, {"id": blog.id, "input": {"imageUrl": None}})["data"]["updateBlog"]
        assert updated["imageUrl"] is None

    def test_update_missing_blog(self, graphql):
        body = graphql(UPDATE_BLOG, {"id": "missing", "input": {"title": "X"}})
        assert body["errors"][0]["extensions"]["code"] == "NOT_FOUND"
        assert "missing" in body["errors"][0]["message"]

    def test_delete_blog(self, graphql, repository):
        blog = repository.create(BlogCreate(title="T", content="C"))

        assert graphql(DELETE_BLOG, {"id": blog.id})["data"]["deleteBlog"] is True
        assert graphql(DELETE_BLOG, {"id": blog.id})["data"]["deleteBlog"] is False
        assert repository.get_by_id(blog.id) is None

    def test_delete_blog_with_unsafe_image_url(self, graphql, repository):
        blog = repository.create(
            BlogCreate(title="T", content="C", image_url="http://testserver/media/blog-images/a/..")
        )

        body = graphql(DELETE_BLOG, {"id": blog.id})

        assert "errors" not in body
        assert body["data"]["deleteBlog"] is True
        assert repository.get_by_id(blog.id) is None

    def test_like_then_dislike(self, graphql, repository):
        blog = repository.create(BlogCreate(title="T", content="C"))

        liked = graphql(REACTION.format(name="likeBlog"), {"id": blog.id})["data"]["likeBlog"]
        assert (liked["isGood"], liked["likesCount"], liked["dislikesCount"]) == (True, 1, 0)

        again = graphql(REACTION.format(name="likeBlog"), {"id": blog.id})["data"]["likeBlog"]
        assert again == liked

        disliked = graphql(REACTION.format(name="dislikeBlog"), {"id": blog.id})["data"]["dislikeBlog"]
        assert (disliked["isGood"], disliked["likesCount"], disliked["dislikesCount"]) == (False, 0, 1)

    def test_toggle_blog_good(self, graphql, repository):
        blog = repository.create(BlogCreate(title="T", content="C"))
        toggled = graphql(REACTION.format(name="toggleBlogGood"), {"id": blog.id})["data"]["toggleBlogGood"]
        assert toggled["isGood"] is True

    def test_reaction_on_missing_blog(self, graphql):
        body = graphql(REACTION.format(name="likeBlog"), {"id": "missing"})
        assert body["errors"][0]["extensions"]["code"] == "NOT_FOUND"


class TestAuthGate:
    def test_mutation_requires_token_when_enabled(self, graphql, repository, settings):
        settings.require_auth = True

        body = graphql(CREATE_BLOG, {"input": {"title": "New", "content": "Post"}})

        assert body["errors"][0]["extensions"]["code"] == "UNAUTHORIZED"
        assert repository.list_blogs() == []

    def test_mutation_with_token(self, graphql, repository, settings, auth_headers):
        settings.require_auth = True

        body = graphql(CREATE_BLOG, {"input": {"title": "New", "content": "Post"}}, headers=auth_headers)

        assert body["data"]["createBlog"]["title"] == "New"

    def test_reads_stay_public(self, graphql, repository, settings):
        settings.require_auth = True
        repository.create(BlogCreate(title="T", content="C"))

        body = graphql(GET_BLOGS_PAGE)

        assert body["data"]["blogs"]["totalCount"] == 1

    def test_invalid_token_is_anonymous(self, graphql, settings):
        settings.require_auth = True

        body = graphql(
            REACTION.format(name="likeBlog"),
            {"id": "whatever"},
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert body["errors"][0]["extensions"]["code"] == "UNAUTHORIZED"


class TestExecution:
    def test_store_runs_off_the_event_loop_thread(self, repository, settings):
        blog = repository.create(BlogCreate(title="T", content="C"))
        loop_thread = threading.current_thread()
        store_threads = []
        original_like = repository.like

        def recording_like(blog_id):
            store_threads.append(threading.current_thread())
            return original_like(blog_id)

        repository.like = recording_like
        context = {"repository": repository, "current_user": None, "settings": settings}

        result = asyncio.run(schema.execute(
            REACTION.format(name="likeBlog"),
            variable_values={"id": blog.id},
            context_value=context,
        ))

        assert result.errors is None
        assert result.data["likeBlog"]["likesCount"] == 1
        assert store_threads and store_threads[0] is not loop_thread
