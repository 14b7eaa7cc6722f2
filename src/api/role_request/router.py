"""Role change request router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from src.api.core.decorators.auth import require_permission
from src.api.core.dependencies import CurrentAuthDep, RoleChangeWorkflowDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.role_request.schemas import (
    ResolveRoleChangeRequest,
    RoleChangeRequestListResponse,
    RoleChangeRequestModel,
    RoleChangeRequestResponse,
    SubmitRoleChangeRequest,
)
from src.database.models import RoleChangeDecision, RoleChangeStatus, StaffPermission

router = APIRouter(
    prefix="/role-requests",
    tags=["role-requests"],
)


@router.post(
    "",
    response_model=RoleChangeRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_role_change_request(
    request: Request,
    body: SubmitRoleChangeRequest,
    workflow: RoleChangeWorkflowDep,
    auth: CurrentAuthDep,
) -> RoleChangeRequestResponse:
    """Ask the organization's administrators for a different role."""
    role_request = await workflow.submit(auth, body.to_role, body.reason)

    return APIResponse.success(
        message_code=MessageCode.ROLE_REQUEST_CREATED,
        data=RoleChangeRequestModel.model_validate(role_request),
    )


@router.get("", response_model=RoleChangeRequestListResponse)
async def list_role_change_requests(
    request: Request,
    workflow: RoleChangeWorkflowDep,
    auth: CurrentAuthDep,
    status_filter: Annotated[RoleChangeStatus | None, Query(alias="status")] = None,
) -> RoleChangeRequestListResponse:
    """List the organization's requests, newest first.

    Only administrators see requests; everyone else gets an empty list.
    """
    role_requests = await workflow.list_requests(auth, status=status_filter)

    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[RoleChangeRequestModel.model_validate(r) for r in role_requests],
    )


@router.get("/mine", response_model=RoleChangeRequestListResponse)
async def list_my_role_change_requests(
    request: Request,
    workflow: RoleChangeWorkflowDep,
    auth: CurrentAuthDep,
) -> RoleChangeRequestListResponse:
    role_requests = await workflow.list_my_requests(auth)

    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[RoleChangeRequestModel.model_validate(r) for r in role_requests],
    )


@router.post("/{request_id}/resolve", response_model=RoleChangeRequestResponse)
@require_permission(StaffPermission.RESOLVE_ROLE_REQUESTS)
async def resolve_role_change_request(
    request_id: UUID,
    request: Request,
    body: ResolveRoleChangeRequest,
    workflow: RoleChangeWorkflowDep,
    auth: CurrentAuthDep,
) -> RoleChangeRequestResponse:
    """Approve or reject a pending request and notify the requester."""
    role_request = await workflow.resolve(
        auth, request_id, body.decision, body.admin_response
    )

    message_code = (
        MessageCode.ROLE_REQUEST_APPROVED
        if body.decision == RoleChangeDecision.APPROVED
        else MessageCode.ROLE_REQUEST_REJECTED
    )
    return APIResponse.success(
        message_code=message_code,
        data=RoleChangeRequestModel.model_validate(role_request),
    )
