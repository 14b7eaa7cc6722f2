"""Organization services module."""

from .permissions import PermissionService

__all__ = [
    "PermissionService",
]
