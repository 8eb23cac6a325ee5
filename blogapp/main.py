"""
Blog API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .errors import BlogError
from .graphql import create_graphql_router
from .limiter import limiter
from .logging_config import api_logger
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from .repositories import build_blogs_repository
from .responses import ApiException, api_exception_handler
from .routes import auth_router, health_router, images_router
from .storage import LocalImageStorage

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the selected backends on startup and shutdown."""
    api_logger.info(
        "Blog API starting",
        environment=settings.environment,
        blogs_repository=settings.blogs_repository,
        require_auth=settings.require_auth,
    )
    yield
    api_logger.info("Blog API stopped")


app = FastAPI(
    title=settings.app_name,
    description="GraphQL API for blog posts with likes and dislikes",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Storage backends live on app state so dependencies can be overridden in tests
app.state.image_storage = LocalImageStorage(
    settings.media_root,
    settings.public_base_url,
    bucket=settings.image_bucket,
)
app.state.blogs_repository = build_blogs_repository(settings, app.state.image_storage)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(BlogError, api_exception_handler)
app.add_exception_handler(ApiException, api_exception_handler)
app.add_exception_handler(Exception, api_exception_handler)

app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(create_graphql_router(debug=settings.debug), prefix="/api/graphql")
app.include_router(auth_router)
app.include_router(images_router)
app.include_router(health_router)

Path(settings.media_root).mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=settings.media_root), name="media")


@app.get("/")
def root():
    """Root endpoint points at the GraphQL endpoint."""
    return {
        "message": settings.app_name,
        "graphql": "/api/graphql",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
