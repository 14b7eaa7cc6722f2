"""Authentication context resolved once per request."""

from dataclasses import dataclass
from uuid import UUID

from src.database.models import Profile, StaffRole
from src.database.models.roles import StaffPermission, has_permission


@dataclass(frozen=True)
class AuthContext:
    """Identity, tenant and role of the caller.

    Built from the caller's profile by the auth middleware and passed into
    services as a parameter.
    """

    user_id: UUID
    organization_id: UUID
    role: StaffRole
    full_name: str = ""
    email: str = ""

    def __post_init__(self):
        """Ensure all required fields are present and valid."""
        if not self.user_id:
            raise ValueError("User is required in authentication context")
        if not self.organization_id:
            raise ValueError("Organization is required in authentication context")
        # Normalize plain strings read from the database
        object.__setattr__(self, "role", StaffRole(self.role))

    @classmethod
    def from_profile(cls, profile: Profile) -> "AuthContext":
        return cls(
            user_id=profile.user_id,
            organization_id=profile.organization_id,
            role=profile.role,
            full_name=profile.full_name or "",
            email=profile.email or "",
        )

    @property
    def is_administrator(self) -> bool:
        return self.role == StaffRole.ADMINISTRATOR

    def can(self, permission: StaffPermission) -> bool:
        return has_permission(self.role, permission)
