"""
Pytest configuration and fixtures for Blog API tests.
"""
import os
import tempfile

# Settings are read at import time, so configure the environment first
os.environ.setdefault("BLOGAPP_MEDIA_ROOT", tempfile.mkdtemp(prefix="blogapp-media-"))
os.environ.setdefault("BLOGAPP_SEED_DEMO_BLOGS", "false")
os.environ.setdefault("BLOGAPP_LOG_FORMAT", "text")
os.environ.setdefault("BLOGAPP_LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from blogapp.auth import create_access_token
from blogapp.config import Settings, get_settings
from blogapp.database import Base, create_session_factory
from blogapp.dependencies import get_blogs_repository, get_image_storage
from blogapp.limiter import limiter
from blogapp.main import app
from blogapp.repositories import DatabaseBlogsRepository, MemoryBlogsRepository
from blogapp.storage import LocalImageStorage

# Disable rate limiting for tests
limiter.enabled = False

PUBLIC_BASE_URL = "http://testserver"


@pytest.fixture(scope="function")
def image_storage(tmp_path):
    """Image storage rooted in a per-test directory."""
    return LocalImageStorage(str(tmp_path / "media"), PUBLIC_BASE_URL)


@pytest.fixture(scope="function")
def repository(image_storage):
    """A fresh in-memory blog store for each test."""
    return MemoryBlogsRepository(image_storage=image_storage)


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_repository(db_engine, image_storage):
    """A database-backed blog store on a fresh schema."""
    return DatabaseBlogsRepository(create_session_factory(db_engine), image_storage=image_storage)


@pytest.fixture(scope="function")
def settings():
    """Default test settings; tests may replace this fixture's fields."""
    return Settings(
        seed_demo_blogs=False,
        blogs_page_size=10,
        require_auth=False,
        admin_username="admin",
        admin_password="testpassword123",
        public_base_url=PUBLIC_BASE_URL,
    )


@pytest.fixture(scope="function")
def client(repository, image_storage, settings):
    """Create a test client wired to the per-test store."""
    app.dependency_overrides[get_blogs_repository] = lambda: repository
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers():
    """Bearer auth headers for the admin user."""
    return {"Authorization": f"Bearer {create_access_token({'sub': 'admin'})}"}


@pytest.fixture
def graphql(client):
    """POST a GraphQL operation and return the decoded body."""
    def _execute(query: str, variables: dict = None, headers: dict = None) -> dict:
        response = client.post(
            "/api/graphql",
            json={"query": query, "variables": variables or {}},
            headers=headers or {},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _execute
