"""Role change request lifecycle: submit, review, resolve and accept."""

from uuid import UUID

from src.api.core.constants import ROLE_CHANGE_RESPONSE_DEDUPE_PREFIX
from src.api.core.exceptions.base import (
    NotFoundError,
    RequestAlreadyProcessedError,
    ValidationError,
)
from src.api.core.messages import MessageCode
from src.cache import invalidate_user_auth_cache
from src.core.base import BaseService
from src.core.context import AuthContext
from src.database.models import (
    REQUESTABLE_ROLES,
    NotificationType,
    RoleChangeDecision,
    RoleChangeRequest,
    RoleChangeStatus,
    StaffPermission,
    StaffRole,
)
from src.services.notification import (
    NotificationEvent,
    NotificationEventPublisher,
    NotificationService,
)
from src.services.organization.permissions import PermissionService
from src.services.staff.service import StaffService
from src.utils.settings.workflow import WorkflowSettings

from .repository import RoleChangeRequestRepository


def _clean_text(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def _parse_role(value: StaffRole | str | None, field: str) -> StaffRole:
    try:
        return StaffRole(value)
    except ValueError:
        raise ValidationError(
            message_code=MessageCode.VALIDATION_INVALID_INPUT,
            details={
                "field": field,
                "value": value,
                "allowed": [role.value for role in StaffRole],
            },
        )


def build_resolution_message(
    to_role: StaffRole, decision: RoleChangeDecision, admin_response: str | None
) -> tuple[str, str]:
    """Return the (title, message) of the requester's resolution notification."""
    if decision == RoleChangeDecision.APPROVED:
        title = "Role Change Approved"
        message = (
            f"Your role change request to {to_role.label} has been approved. "
            "Please accept the role change in your notifications."
        )
    else:
        title = "Role Change Rejected"
        message = f"Your role change request to {to_role.label} has been rejected."

    if admin_response:
        message += f" Admin response: {admin_response}"
    return title, message


class RoleChangeWorkflow(BaseService):
    """Orchestrates role change requests and the notifications they produce.

    Approval never writes the requester's role. The role changes only when the
    requester accepts the approval from their notification.
    """

    def __init__(
        self,
        db,
        publisher: NotificationEventPublisher | None = None,
        settings: WorkflowSettings | None = None,
    ):
        super().__init__(db)
        self.requests = RoleChangeRequestRepository(db)
        self.notifications = NotificationService(db, publisher)
        self.staff = StaffService(db)
        self.settings = settings or WorkflowSettings()

    async def submit(
        self,
        context: AuthContext,
        to_role: StaffRole | str,
        reason: str | None = None,
    ) -> RoleChangeRequest:
        """Submit a role change request for the caller.

        Organization, current role and the requester snapshot come from the
        auth context, never from client input.
        """
        target_role = _parse_role(to_role, "to_role")
        if target_role not in REQUESTABLE_ROLES:
            raise ValidationError(
                message_code=MessageCode.VALIDATION_INVALID_INPUT,
                details={
                    "field": "to_role",
                    "value": target_role.value,
                    "allowed": sorted(role.value for role in REQUESTABLE_ROLES),
                },
            )
        if target_role == context.role:
            raise ValidationError(
                message_code=MessageCode.ROLE_UNCHANGED,
                details={"from_role": context.role.value, "to_role": target_role.value},
            )

        request = await self.requests.create(
            user_id=context.user_id,
            organization_id=context.organization_id,
            from_role=context.role,
            to_role=target_role,
            requested_by_name=context.full_name,
            requested_by_email=context.email,
            reason=_clean_text(reason),
        )

        admin_alerts = []
        if self.settings.NOTIFY_ADMINS_ON_ROLE_REQUEST:
            admin_alerts = await self._stage_admin_alerts(context, request)

        await self._commit("submit_role_change_request")

        self.logger.info(
            "Role change request submitted",
            request_id=str(request.id),
            user_id=str(context.user_id),
            from_role=context.role.value,
            to_role=target_role.value,
            admins_notified=len(admin_alerts),
        )
        await self.notifications.publish(NotificationEvent.INSERT, admin_alerts)
        return request

    async def _stage_admin_alerts(self, context: AuthContext, request: RoleChangeRequest):
        admins = await self.staff.list_administrators(context.organization_id)
        admin_ids = [admin.user_id for admin in admins if admin.user_id != context.user_id]
        requester = context.full_name or context.email or "A staff member"

        return self.notifications.stage_many(
            admin_ids,
            organization_id=context.organization_id,
            type=NotificationType.ROLE_CHANGE_REQUEST,
            title="New Role Change Request",
            message=(
                f"{requester} has requested a role change from "
                f"{context.role.label} to {StaffRole(request.to_role).label}."
            ),
            sender_id=context.user_id,
            data={
                "role_change_request_id": str(request.id),
                "from_role": context.role.value,
                "to_role": request.to_role,
            },
        )

    async def list_requests(
        self, context: AuthContext, status: RoleChangeStatus | None = None
    ) -> list[RoleChangeRequest]:
        """List the caller's organization requests, newest first.

        Callers without the review permission get an empty list.
        """
        if not PermissionService.check(context, StaffPermission.VIEW_ROLE_REQUESTS):
            self.logger.debug(
                "Role request listing hidden from non-administrator",
                user_id=str(context.user_id),
                role=context.role.value,
            )
            return []

        return await self.requests.list_for_organization(
            context.organization_id, status=status
        )

    async def list_my_requests(self, context: AuthContext) -> list[RoleChangeRequest]:
        return await self.requests.list_for_user(context.user_id)

    async def resolve(
        self,
        context: AuthContext,
        request_id: UUID,
        decision: RoleChangeDecision | str,
        admin_response: str | None = None,
    ) -> RoleChangeRequest:
        """Approve or reject a pending request and notify the requester.

        The status update and the notification are committed together.
        """
        PermissionService.require(context, StaffPermission.RESOLVE_ROLE_REQUESTS)

        try:
            decision = RoleChangeDecision(decision)
        except ValueError:
            raise ValidationError(
                message_code=MessageCode.VALIDATION_INVALID_INPUT,
                details={
                    "field": "decision",
                    "allowed": [d.value for d in RoleChangeDecision],
                },
            )

        request = await self.requests.get(request_id)
        # Requests of other organizations are reported as missing
        if request is None or request.organization_id != context.organization_id:
            raise NotFoundError(
                message_code=MessageCode.ROLE_REQUEST_NOT_FOUND,
                details={"request_id": str(request_id)},
            )

        if not request.is_pending:
            raise RequestAlreadyProcessedError(
                details={"request_id": str(request_id), "status": request.status}
            )

        response_text = _clean_text(admin_response)
        transitioned = await self.requests.mark_resolved(
            request_id,
            decision.status,
            response_text,
            processed_by=context.user_id,
        )
        if not transitioned:
            # Another administrator resolved it between the read and the update
            await self.db.rollback()
            raise RequestAlreadyProcessedError(details={"request_id": str(request_id)})

        to_role = StaffRole(request.to_role)
        title, message = build_resolution_message(to_role, decision, response_text)
        notification = self.notifications.stage(
            user_id=request.user_id,
            organization_id=request.organization_id,
            type=NotificationType.ROLE_CHANGE_RESPONSE,
            title=title,
            message=message,
            sender_id=context.user_id,
            data={
                "role_change_request_id": str(request.id),
                "new_role": to_role.value,
                "action": decision.value,
                "admin_response": response_text or "",
            },
            dedupe_key=f"{ROLE_CHANGE_RESPONSE_DEDUPE_PREFIX}:{request.id}",
        )

        await self._commit("resolve_role_change_request")
        await self.db.refresh(request)

        self.logger.info(
            "Role change request resolved",
            request_id=str(request.id),
            decision=decision.value,
            processed_by=str(context.user_id),
            requester_id=str(request.user_id),
        )
        await self.notifications.publish(NotificationEvent.INSERT, [notification])
        return request

    async def accept_role_change(
        self, context: AuthContext, notification_id: UUID
    ) -> StaffRole:
        """Adopt the role carried by an approved role change notification.

        Accepting an already read notification changes nothing and returns the
        caller's current role.
        """
        notification = await self.notifications.get_for_user(
            notification_id, context.user_id
        )

        data = notification.data or {}
        if (
            notification.type != NotificationType.ROLE_CHANGE_RESPONSE.value
            or data.get("action") != RoleChangeDecision.APPROVED.value
        ):
            raise ValidationError(
                message_code=MessageCode.ROLE_CHANGE_NOT_ACCEPTABLE,
                details={"notification_id": str(notification_id)},
            )

        try:
            new_role = StaffRole(data.get("new_role"))
        except ValueError:
            raise ValidationError(
                message_code=MessageCode.ROLE_CHANGE_NOT_ACCEPTABLE,
                details={
                    "notification_id": str(notification_id),
                    "new_role": data.get("new_role"),
                },
            )

        profile = await self.staff.get_profile_by_user_id(context.user_id)
        if profile is None:
            raise NotFoundError(
                message_code=MessageCode.PROFILE_NOT_FOUND,
                details={"user_id": str(context.user_id)},
            )

        if notification.is_read:
            return StaffRole(profile.role)

        previous_role = profile.role
        profile.role = new_role.value
        notification.is_read = True
        await self._commit("accept_role_change")

        await invalidate_user_auth_cache(context.user_id)

        self.logger.info(
            "Role change accepted",
            user_id=str(context.user_id),
            from_role=previous_role,
            to_role=new_role.value,
            notification_id=str(notification.id),
        )
        await self.notifications.publish(NotificationEvent.UPDATE, [notification])
        return new_role
