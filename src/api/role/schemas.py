"""Role API schemas."""

from uuid import UUID

from pydantic import BaseModel

from src.api.core.messages import APIResponse
from src.database.models import StaffPermission, StaffRole


class RoleDefinitionData(BaseModel):
    role: StaffRole
    label: str
    permissions: list[StaffPermission]


class RoleDefinitionsData(BaseModel):
    roles: list[RoleDefinitionData]
    all_permissions: list[StaffPermission]


class CurrentRoleData(BaseModel):
    user_id: UUID
    organization_id: UUID
    full_name: str
    email: str
    role: StaffRole
    label: str
    permissions: list[StaffPermission]


RoleDefinitionsResponse = APIResponse[RoleDefinitionsData]
CurrentRoleResponse = APIResponse[CurrentRoleData]
