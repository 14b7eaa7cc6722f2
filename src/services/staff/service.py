"""Staff directory lookups scoped to one organization."""

from uuid import UUID

from sqlalchemy import select

from src.api.core.exceptions.base import NotFoundError
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import Profile, StaffRole


class StaffService(BaseService):
    """Read access to staff profiles; role writes go through the role workflow."""

    async def get_profile_by_user_id(self, user_id: UUID) -> Profile | None:
        stmt = select(Profile).where(Profile.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_organization_staff(
        self,
        organization_id: UUID,
        exclude_user_id: UUID | None = None,
    ) -> list[Profile]:
        """List the organization's staff ordered by name."""
        stmt = select(Profile).where(Profile.organization_id == organization_id)
        if exclude_user_id is not None:
            stmt = stmt.where(Profile.user_id != exclude_user_id)
        stmt = stmt.order_by(Profile.full_name, Profile.email)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_organization_member(
        self, organization_id: UUID, user_id: UUID
    ) -> Profile:
        """Get a staff member of the organization.

        Profiles in other organizations are reported as missing.
        """
        stmt = select(Profile).where(
            Profile.organization_id == organization_id,
            Profile.user_id == user_id,
        )
        result = await self.db.execute(stmt)
        profile = result.scalar_one_or_none()

        if not profile:
            raise NotFoundError(
                message_code=MessageCode.STAFF_MEMBER_NOT_FOUND,
                details={"user_id": str(user_id)},
            )
        return profile

    async def list_member_user_ids(
        self, organization_id: UUID, user_ids: list[UUID] | None = None
    ) -> list[UUID]:
        """Return user ids of organization members, optionally restricted to a subset."""
        stmt = select(Profile.user_id).where(Profile.organization_id == organization_id)
        if user_ids is not None:
            stmt = stmt.where(Profile.user_id.in_(user_ids))

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_administrators(self, organization_id: UUID) -> list[Profile]:
        stmt = select(Profile).where(
            Profile.organization_id == organization_id,
            Profile.role == StaffRole.ADMINISTRATOR.value,
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
