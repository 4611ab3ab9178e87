"""Version 1 API endpoints."""

from .endpoints import feed_router, posts_router, users_router
from .errors import install_error_handlers

__all__ = [
    "feed_router",
    "install_error_handlers",
    "posts_router",
    "users_router",
]
