from fastapi import Request

from app.repositories.user_cache import UserCache


def get_user_cache(request: Request) -> UserCache:
    """The application's user cache, created at startup."""
    return request.app.state.user_cache
