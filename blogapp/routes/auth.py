"""
Authentication routes for the admin login.
"""
from fastapi import APIRouter, Depends, Request

from ..auth import authenticate_admin, create_access_token, get_current_user
from ..config import Settings, get_settings
from ..limiter import limiter
from ..logging_config import api_logger
from ..responses import unauthorized
from ..schemas.auth import LoginRequest, Token

settings = get_settings()

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, credentials: LoginRequest, config: Settings = Depends(get_settings)):
    """Exchange the admin credential for a bearer token."""
    if not authenticate_admin(credentials.username, credentials.password, config):
        api_logger.warning("Rejected login", username=credentials.username)
        unauthorized("Incorrect username or password")

    api_logger.info("Issued access token", username=credentials.username)
    return Token(access_token=create_access_token({"sub": credentials.username}))


@router.get("/me")
def me(current_user=Depends(get_current_user)):
    """Who the bearer token belongs to, if anyone."""
    return {"authenticated": current_user is not None, "username": current_user}
