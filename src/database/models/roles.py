"""Staff permissions and the role-to-permission mapping."""

from enum import Enum

from .profiles import StaffRole


class StaffPermission(str, Enum):
    # Staff directory
    VIEW_STAFF = "view_staff"

    # Messaging
    SEND_DIRECT_MESSAGE = "send_direct_message"
    SEND_BROADCAST = "send_broadcast"

    # Role administration
    VIEW_ROLE_REQUESTS = "view_role_requests"
    RESOLVE_ROLE_REQUESTS = "resolve_role_requests"


# Role-based permission mappings using pure Python logic
ROLE_PERMISSIONS = {
    StaffRole.ADMINISTRATOR: {
        StaffPermission.VIEW_STAFF,
        StaffPermission.SEND_DIRECT_MESSAGE,
        StaffPermission.SEND_BROADCAST,
        StaffPermission.VIEW_ROLE_REQUESTS,
        StaffPermission.RESOLVE_ROLE_REQUESTS,
    },
    StaffRole.MANAGER: {
        StaffPermission.VIEW_STAFF,
        StaffPermission.SEND_DIRECT_MESSAGE,
        StaffPermission.SEND_BROADCAST,
    },
    StaffRole.PHARMACIST: {
        StaffPermission.VIEW_STAFF,
    },
    StaffRole.PHARMACY_TECH: {
        StaffPermission.VIEW_STAFF,
    },
}


def get_permissions_for_role(role: StaffRole | str) -> set[StaffPermission]:
    """Get all permissions for a given role."""
    try:
        return ROLE_PERMISSIONS.get(StaffRole(role), set())
    except ValueError:
        return set()


def has_permission(role: StaffRole | str, permission: StaffPermission) -> bool:
    """Check if a role has a specific permission."""
    return permission in get_permissions_for_role(role)
