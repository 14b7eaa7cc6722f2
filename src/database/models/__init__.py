"""Database models for PharmaStock API."""

from .base import Base
from .notifications import Notification, NotificationType
from .organizations import Organization
from .profiles import REQUESTABLE_ROLES, ROLE_LABELS, Profile, StaffRole
from .role_change_requests import (
    RoleChangeDecision,
    RoleChangeRequest,
    RoleChangeStatus,
)
from .roles import StaffPermission

# Export all models and enums
__all__ = [
    # Base
    "Base",
    # Enums
    "StaffRole",
    "StaffPermission",
    "RoleChangeStatus",
    "RoleChangeDecision",
    "NotificationType",
    "ROLE_LABELS",
    "REQUESTABLE_ROLES",
    # Models
    "Organization",
    "Profile",
    "RoleChangeRequest",
    "Notification",
]
