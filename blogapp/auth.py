"""
Authentication utilities for JWT tokens and the admin credential.
"""
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import Settings, get_settings
from .errors import Unauthorized

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


@lru_cache()
def _admin_password_hash(password: str) -> str:
    return get_password_hash(password)


def authenticate_admin(username: str, password: str, config: Settings = settings) -> bool:
    """Check the configured admin credential. Disabled when no password is set."""
    if not config.admin_password:
        return False
    if not secrets.compare_digest(username, config.admin_username):
        return False
    return verify_password(password, _admin_password_hash(config.admin_password))


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str, expected_type: str = "access") -> Optional[dict]:
    """Verify a JWT token and return its payload."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type", "access") != expected_type:
        return None
    return payload


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """The username carried by the bearer token, or None (optional auth)."""
    if not token:
        return None

    payload = verify_token(token, "access")
    if not payload:
        return None

    return payload.get("sub")


def get_required_user(
    current_user: Optional[str] = Depends(get_current_user),
    config: Settings = Depends(get_settings),
) -> Optional[str]:
    """Raise 401 when auth is required and the caller is anonymous."""
    if config.require_auth and not current_user:
        raise Unauthorized("Not authenticated")
    return current_user


def require_authenticated(is_authenticated: bool, require_auth: bool) -> None:
    """Gate for mutations outside FastAPI's dependency system."""
    if require_auth and not is_authenticated:
        raise Unauthorized("Authentication required")
