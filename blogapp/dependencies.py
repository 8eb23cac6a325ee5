"""
FastAPI dependencies shared by the GraphQL endpoint and the REST routes.
"""
from fastapi import Request

from .repositories import BlogsRepository
from .storage import ImageStorage


def get_blogs_repository(request: Request) -> BlogsRepository:
    """The blog store built at startup."""
    return request.app.state.blogs_repository


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage
