from .blog import Blog, BlogCreate, BlogUpdate, BlogsPage, BlogDateCount
from .auth import LoginRequest, Token

__all__ = [
    "Blog", "BlogCreate", "BlogUpdate", "BlogsPage", "BlogDateCount",
    "LoginRequest", "Token",
]
