"""Staff directory router."""

from fastapi import APIRouter, Request

from src.api.core.decorators.auth import require_permission
from src.api.core.dependencies import CurrentAuthDep, StaffServiceDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.staff.schemas import StaffListResponse, StaffMemberModel
from src.database.models import StaffPermission

router = APIRouter(
    prefix="/staff",
    tags=["staff"],
)


@router.get("", response_model=StaffListResponse)
@require_permission(StaffPermission.VIEW_STAFF)
async def list_staff(
    request: Request,
    staff: StaffServiceDep,
    auth: CurrentAuthDep,
    exclude_self: bool = False,
) -> StaffListResponse:
    """List the caller's organization, e.g. to pick message recipients."""
    profiles = await staff.list_organization_staff(
        auth.organization_id,
        exclude_user_id=auth.user_id if exclude_self else None,
    )

    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[StaffMemberModel.model_validate(profile) for profile in profiles],
    )
