from .decorator import cached, invalidate_user_auth_cache, invalidate_user_cache

__all__ = [
    "cached",
    "invalidate_user_auth_cache",
    "invalidate_user_cache",
]
