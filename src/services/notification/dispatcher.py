"""Notification dispatch and inbox operations."""

from enum import Enum
from uuid import UUID

from sqlalchemy import func, select

from src.api.core.constants import NOTIFICATION_LIST_LIMIT
from src.api.core.exceptions.base import NotFoundError, ValidationError
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.core.context import AuthContext
from src.database.models import Notification, NotificationType, StaffPermission
from src.services.organization.permissions import PermissionService
from src.services.staff.service import StaffService

from .realtime import NotificationEvent, NotificationEventPublisher


class BroadcastRecipients(str, Enum):
    ALL_STAFF = "all_staff"
    EXPLICIT = "explicit"


def _require_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(
            message_code=MessageCode.VALIDATION_INVALID_INPUT,
            details={"field": field, "description": f"{field} must not be blank"},
        )
    return text


class NotificationService(BaseService):
    """Creates single-recipient notification rows and serves the caller's inbox.

    Writes are committed by this service; realtime events go out only after
    the commit succeeded.
    """

    def __init__(self, db, publisher: NotificationEventPublisher | None = None):
        super().__init__(db)
        self.publisher = publisher

    def stage(
        self,
        *,
        user_id: UUID,
        organization_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        sender_id: UUID | None = None,
        data: dict | None = None,
        dedupe_key: str | None = None,
    ) -> Notification:
        """Add a notification to the current unit of work without committing."""
        notification = Notification(
            user_id=user_id,
            organization_id=organization_id,
            sender_id=sender_id,
            type=type.value,
            title=title,
            message=message,
            data=data,
            is_read=False,
            dedupe_key=dedupe_key,
        )
        self.db.add(notification)
        return notification

    def stage_many(
        self,
        recipient_ids: list[UUID],
        *,
        organization_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        sender_id: UUID | None = None,
        data: dict | None = None,
    ) -> list[Notification]:
        """Stage one row per recipient. Broadcasts are never multi-recipient rows."""
        return [
            self.stage(
                user_id=recipient_id,
                organization_id=organization_id,
                type=type,
                title=title,
                message=message,
                sender_id=sender_id,
                data=data,
            )
            for recipient_id in recipient_ids
        ]

    async def publish(
        self, event: NotificationEvent, notifications: list[Notification]
    ) -> None:
        if self.publisher is None:
            return
        for notification in notifications:
            await self.publisher.publish(event, notification)

    async def send_direct_message(
        self,
        context: AuthContext,
        recipient_id: UUID,
        title: str,
        message: str,
    ) -> Notification:
        """Send a direct message to one member of the caller's organization."""
        PermissionService.require(context, StaffPermission.SEND_DIRECT_MESSAGE)
        title = _require_text(title, "title")
        message = _require_text(message, "message")

        if recipient_id == context.user_id:
            raise ValidationError(
                message_code=MessageCode.VALIDATION_INVALID_INPUT,
                details={"description": "Cannot send a direct message to yourself"},
            )

        # Members of other organizations are reported as missing
        await StaffService(self.db).get_organization_member(
            context.organization_id, recipient_id
        )

        notification = self.stage(
            user_id=recipient_id,
            organization_id=context.organization_id,
            type=NotificationType.DIRECT_MESSAGE,
            title=title,
            message=message,
            sender_id=context.user_id,
        )
        await self._commit("send_direct_message")

        self.logger.info(
            "Direct message sent",
            sender_id=str(context.user_id),
            recipient_id=str(recipient_id),
            notification_id=str(notification.id),
        )
        await self.publish(NotificationEvent.INSERT, [notification])
        return notification

    async def resolve_broadcast_recipients(
        self,
        context: AuthContext,
        recipients: BroadcastRecipients,
        recipient_ids: list[UUID] | None = None,
    ) -> list[UUID]:
        """Resolve the recipient set. The sender is never a recipient."""
        staff_service = StaffService(self.db)

        if recipients == BroadcastRecipients.ALL_STAFF:
            member_ids = await staff_service.list_member_user_ids(
                context.organization_id
            )
        else:
            if not recipient_ids:
                raise ValidationError(
                    message_code=MessageCode.NO_RECIPIENTS,
                    details={"recipients": recipients.value},
                )
            member_ids = await staff_service.list_member_user_ids(
                context.organization_id, list(dict.fromkeys(recipient_ids))
            )

        resolved = [user_id for user_id in member_ids if user_id != context.user_id]

        if recipients == BroadcastRecipients.EXPLICIT and not resolved:
            raise ValidationError(
                message_code=MessageCode.NO_RECIPIENTS,
                details={
                    "description": "None of the selected staff belong to your organization"
                },
            )
        return resolved

    async def send_broadcast(
        self,
        context: AuthContext,
        title: str,
        message: str,
        recipients: BroadcastRecipients,
        recipient_ids: list[UUID] | None = None,
    ) -> int:
        """Send a broadcast and return the number of rows inserted.

        All rows are committed in one transaction.
        """
        PermissionService.require(context, StaffPermission.SEND_BROADCAST)
        title = _require_text(title, "title")
        message = _require_text(message, "message")

        resolved = await self.resolve_broadcast_recipients(
            context, recipients, recipient_ids
        )
        if not resolved:
            self.logger.info(
                "Broadcast has no recipients",
                sender_id=str(context.user_id),
                organization_id=str(context.organization_id),
            )
            return 0

        notifications = self.stage_many(
            resolved,
            organization_id=context.organization_id,
            type=NotificationType.BROADCAST,
            title=title,
            message=message,
            sender_id=context.user_id,
        )
        await self._commit("send_broadcast")

        self.logger.info(
            "Broadcast sent",
            sender_id=str(context.user_id),
            organization_id=str(context.organization_id),
            recipients=len(notifications),
        )
        await self.publish(NotificationEvent.INSERT, notifications)
        return len(notifications)

    async def list_for_user(
        self,
        user_id: UUID,
        unread_only: bool = False,
        limit: int = NOTIFICATION_LIST_LIMIT,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_unread(self, user_id: UUID) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def get_for_user(self, notification_id: UUID, user_id: UUID) -> Notification:
        """Get a notification addressed to the user.

        Notifications addressed to someone else are reported as missing.
        """
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        result = await self.db.execute(stmt)
        notification = result.scalar_one_or_none()

        if not notification:
            raise NotFoundError(
                message_code=MessageCode.NOTIFICATION_NOT_FOUND,
                details={"notification_id": str(notification_id)},
            )
        return notification

    async def mark_read(self, context: AuthContext, notification_id: UUID) -> Notification:
        """Flip is_read false to true. Already read notifications are left as is."""
        notification = await self.get_for_user(notification_id, context.user_id)
        if notification.is_read:
            return notification

        notification.is_read = True
        await self._commit("mark_notification_read")
        await self.publish(NotificationEvent.UPDATE, [notification])
        return notification

    async def mark_all_read(self, context: AuthContext) -> int:
        """Mark every unread notification of the caller read and return how many changed."""
        stmt = select(Notification).where(
            Notification.user_id == context.user_id,
            Notification.is_read.is_(False),
        )
        result = await self.db.execute(stmt)
        unread = list(result.scalars().all())
        if not unread:
            return 0

        for notification in unread:
            notification.is_read = True
        await self._commit("mark_all_notifications_read")

        self.logger.info(
            "Marked notifications read",
            user_id=str(context.user_id),
            count=len(unread),
        )
        await self.publish(NotificationEvent.UPDATE, unread)
        return len(unread)
