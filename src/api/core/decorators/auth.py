"""Authentication and permission decorators."""

from functools import wraps

from fastapi import Request, status

from src.api.core.exceptions.base import PharmaStockException
from src.api.core.messages import MessageCode
from src.database.models import StaffPermission
from src.services.organization.permissions import PermissionService


def _find_request(args: tuple, kwargs: dict) -> Request | None:
    for value in (*args, *kwargs.values()):
        if isinstance(value, Request):
            return value
    return None


def require_permission(permission: StaffPermission):
    """
    Decorator to check the caller's role permissions.

    Args:
        permission: The staff permission to check

    Uses the AuthContext from request.state (set by auth middleware).
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = _find_request(args, kwargs)
            if not request:
                raise PharmaStockException(
                    MessageCode.AUTH_REQUIRED,
                    status.HTTP_401_UNAUTHORIZED,
                    {"description": "Request object not found"},
                )

            auth_context = getattr(request.state, "auth", None)
            if auth_context is None:
                raise PharmaStockException(
                    MessageCode.AUTH_MISSING_CONTEXT,
                    status.HTTP_401_UNAUTHORIZED,
                    {
                        "description": "User authentication required for permission check"
                    },
                )

            PermissionService.require(auth_context, permission)

            return await func(*args, **kwargs)

        return wrapper

    return decorator
