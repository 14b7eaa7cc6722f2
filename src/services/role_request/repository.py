"""Persistence for role change requests."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, update

from src.api.core.constants import ROLE_REQUEST_LIST_LIMIT
from src.core.base import BaseService
from src.database.models import RoleChangeRequest, RoleChangeStatus, StaffRole


class RoleChangeRequestRepository(BaseService):
    """Reads and writes role_change_requests rows.

    Nothing here commits; the workflow owns the transaction.
    """

    async def create(
        self,
        *,
        user_id: UUID,
        organization_id: UUID,
        from_role: StaffRole,
        to_role: StaffRole,
        requested_by_name: str,
        requested_by_email: str,
        reason: str | None = None,
    ) -> RoleChangeRequest:
        request = RoleChangeRequest(
            user_id=user_id,
            organization_id=organization_id,
            from_role=from_role.value,
            to_role=to_role.value,
            status=RoleChangeStatus.PENDING.value,
            requested_by_name=requested_by_name,
            requested_by_email=requested_by_email,
            reason=reason,
        )
        self.db.add(request)
        await self.db.flush()
        return request

    async def get(self, request_id: UUID) -> RoleChangeRequest | None:
        return await self.db.get(RoleChangeRequest, request_id)

    async def list_for_organization(
        self,
        organization_id: UUID,
        status: RoleChangeStatus | None = None,
        limit: int = ROLE_REQUEST_LIST_LIMIT,
    ) -> list[RoleChangeRequest]:
        """List an organization's requests, newest first."""
        stmt = select(RoleChangeRequest).where(
            RoleChangeRequest.organization_id == organization_id
        )
        if status is not None:
            stmt = stmt.where(RoleChangeRequest.status == status.value)
        stmt = stmt.order_by(RoleChangeRequest.created_at.desc()).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(
        self, user_id: UUID, limit: int = ROLE_REQUEST_LIST_LIMIT
    ) -> list[RoleChangeRequest]:
        stmt = (
            select(RoleChangeRequest)
            .where(RoleChangeRequest.user_id == user_id)
            .order_by(RoleChangeRequest.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_resolved(
        self,
        request_id: UUID,
        status: RoleChangeStatus,
        admin_response: str | None,
        processed_by: UUID,
    ) -> bool:
        """Move a pending request to a terminal status.

        The update only matches while the row is still pending, so at most one
        caller wins. Returns False when the request was no longer pending.
        """
        now = datetime.now(timezone.utc)
        stmt = (
            update(RoleChangeRequest)
            .where(
                RoleChangeRequest.id == request_id,
                RoleChangeRequest.status == RoleChangeStatus.PENDING.value,
            )
            .values(
                status=status.value,
                admin_response=admin_response,
                processed_at=now,
                processed_by=processed_by,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
