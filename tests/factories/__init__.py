"""Test factories for PharmaStock API models."""

from .base import AsyncSQLAlchemyModelFactory
from .notifications import NotificationFactory
from .organizations import OrganizationFactory
from .profiles import ProfileFactory
from .role_change_requests import RoleChangeRequestFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "NotificationFactory",
    "OrganizationFactory",
    "ProfileFactory",
    "RoleChangeRequestFactory",
]
