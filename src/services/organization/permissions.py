"""Permission checks against the caller's AuthContext."""

from src.api.core.exceptions.base import AuthorizationError
from src.api.core.messages import MessageCode
from src.core.context import AuthContext
from src.database.models import StaffPermission, StaffRole
from src.database.models.roles import get_permissions_for_role
from src.utils.logger import get_logger

logger = get_logger(__name__)


class PermissionService:
    """Role-to-permission checks using pure Python logic."""

    @staticmethod
    def check(context: AuthContext, permission: StaffPermission) -> bool:
        """Check if the caller's role grants a permission."""
        return context.can(permission)

    @classmethod
    def require(cls, context: AuthContext, permission: StaffPermission) -> None:
        """Raise AuthorizationError unless the caller holds the permission."""
        if cls.check(context, permission):
            return

        logger.warning(
            "Permission denied",
            user_id=str(context.user_id),
            role=context.role.value,
            permission=permission.value,
        )
        raise AuthorizationError(
            message_code=MessageCode.AUTH_INSUFFICIENT_ROLE_PERMISSIONS,
            details={
                "required_permission": permission.value,
                "user_role": context.role.value,
            },
        )

    @staticmethod
    def get_available_roles() -> list[StaffRole]:
        """Get all available staff roles."""
        return list(StaffRole)

    @staticmethod
    def get_available_permissions() -> list[StaffPermission]:
        """Get all available staff permissions."""
        return list(StaffPermission)

    @staticmethod
    def get_role_permissions(role: StaffRole) -> set[StaffPermission]:
        """Get permissions for a specific role."""
        return get_permissions_for_role(role)
