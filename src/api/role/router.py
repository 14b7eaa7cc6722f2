"""Role domain router."""

from fastapi import APIRouter, Request

from src.api.core.dependencies import CurrentAuthDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.role.schemas import (
    CurrentRoleData,
    CurrentRoleResponse,
    RoleDefinitionData,
    RoleDefinitionsData,
    RoleDefinitionsResponse,
)
from src.services.organization.permissions import PermissionService

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
)


def _sorted_permissions(permissions) -> list:
    return sorted(permissions, key=lambda perm: perm.value)


@router.get("/definitions", response_model=RoleDefinitionsResponse)
async def list_role_definitions(
    request: Request,
    auth: CurrentAuthDep,
) -> RoleDefinitionsResponse:
    """List all available roles and their permissions (static definitions)."""
    roles = [
        RoleDefinitionData(
            role=role,
            label=role.label,
            permissions=_sorted_permissions(PermissionService.get_role_permissions(role)),
        )
        for role in PermissionService.get_available_roles()
    ]

    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=RoleDefinitionsData(
            roles=roles,
            all_permissions=PermissionService.get_available_permissions(),
        ),
    )


@router.get("/me", response_model=CurrentRoleResponse)
async def get_current_role(
    request: Request,
    auth: CurrentAuthDep,
) -> CurrentRoleResponse:
    """Get the caller's role and the permissions it grants."""
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=CurrentRoleData(
            user_id=auth.user_id,
            organization_id=auth.organization_id,
            full_name=auth.full_name,
            email=auth.email,
            role=auth.role,
            label=auth.role.label,
            permissions=_sorted_permissions(
                PermissionService.get_role_permissions(auth.role)
            ),
        ),
    )
