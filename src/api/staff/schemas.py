"""Staff directory API schemas."""

from uuid import UUID

from pydantic import BaseModel

from src.api.core.messages import APIResponse
from src.database.models import StaffRole


class StaffMemberModel(BaseModel):
    user_id: UUID
    organization_id: UUID
    full_name: str
    email: str
    role: StaffRole

    model_config = {"from_attributes": True}


StaffListResponse = APIResponse[list[StaffMemberModel]]
