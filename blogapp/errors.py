"""
Domain errors raised by the blog store and the layers around it.
"""


class BlogError(Exception):
    """Base class for errors the API reports back to callers."""

    code = "BLOG_ERROR"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(BlogError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str = "Blog", id: str = None):
        self.resource = resource
        self.id = id
        message = f"{resource} not found" if not id else f"{resource} '{id}' not found"
        super().__init__(message)


class ValidationError(BlogError):
    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class Unauthorized(BlogError):
    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class BackendUnavailable(BlogError):
    """The durable store is unreachable or misconfigured."""

    code = "BACKEND_UNAVAILABLE"
    status_code = 503
