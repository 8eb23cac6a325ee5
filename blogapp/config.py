"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_GENERATED_SECRET = secrets.token_urlsafe(32)


class Settings(BaseSettings):
    """Application settings loaded from BLOGAPP_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BLOGAPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Blog API"
    debug: bool = False
    environment: str = "development"

    # Storage backend: "memory" or "database"
    blogs_repository: str = "memory"
    database_url: Optional[str] = os.getenv("DATABASE_URL")
    seed_demo_blogs: bool = True
    blogs_page_size: int = 10

    # Security
    require_auth: bool = False
    secret_key: str = _GENERATED_SECRET
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60  # 1 hour
    admin_username: str = "admin"
    admin_password: Optional[str] = None
    login_rate_limit: str = "5/minute"

    # Images
    media_root: str = "./data/media"
    public_base_url: str = "http://localhost:8000"
    image_bucket: str = "blog-images"
    max_image_bytes: int = 5 * 1024 * 1024

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    @field_validator("blogs_page_size")
    @classmethod
    def _positive_page_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("BLOGAPP_BLOGS_PAGE_SIZE must be a positive number")
        return value

    @field_validator("blogs_repository")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        return value.strip().lower()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Validate secret key on startup
settings = get_settings()
if settings.environment == "production" and settings.secret_key == _GENERATED_SECRET:
    raise ValueError(
        "BLOGAPP_SECRET_KEY must be set in production! "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
