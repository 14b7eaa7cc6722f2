"""Role change request API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse
from src.database.models import RoleChangeDecision, RoleChangeStatus, StaffRole


class RoleChangeRequestModel(BaseModel):
    id: UUID
    user_id: UUID
    organization_id: UUID
    from_role: StaffRole
    to_role: StaffRole
    status: RoleChangeStatus
    requested_by_name: str
    requested_by_email: str
    reason: str | None = None
    admin_response: str | None = None
    created_at: datetime
    processed_at: datetime | None = None
    processed_by: UUID | None = None

    model_config = {"from_attributes": True}


class SubmitRoleChangeRequest(BaseModel):
    to_role: StaffRole
    reason: str | None = Field(default=None, max_length=1000)


class ResolveRoleChangeRequest(BaseModel):
    decision: RoleChangeDecision
    admin_response: str | None = Field(default=None, max_length=2000)


RoleChangeRequestResponse = APIResponse[RoleChangeRequestModel]
RoleChangeRequestListResponse = APIResponse[list[RoleChangeRequestModel]]
