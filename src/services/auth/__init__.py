"""Authentication services."""

from .handlers import decode_access_token, handle_jwt_auth, load_auth_context

__all__ = [
    "decode_access_token",
    "handle_jwt_auth",
    "load_auth_context",
]
