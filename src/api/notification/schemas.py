"""Notification API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.constants import (
    NOTIFICATION_MESSAGE_MAX_LENGTH,
    NOTIFICATION_TITLE_MAX_LENGTH,
)
from src.api.core.messages import APIResponse
from src.database.models import NotificationType, StaffRole
from src.services.notification import BroadcastRecipients


class NotificationModel(BaseModel):
    id: UUID
    user_id: UUID
    organization_id: UUID
    sender_id: UUID | None = None
    type: NotificationType
    title: str
    message: str
    data: dict | None = None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class DirectMessageRequest(BaseModel):
    recipient_id: UUID
    title: str = Field(max_length=NOTIFICATION_TITLE_MAX_LENGTH)
    message: str = Field(max_length=NOTIFICATION_MESSAGE_MAX_LENGTH)


class BroadcastRequest(BaseModel):
    title: str = Field(max_length=NOTIFICATION_TITLE_MAX_LENGTH)
    message: str = Field(max_length=NOTIFICATION_MESSAGE_MAX_LENGTH)
    recipients: BroadcastRecipients = BroadcastRecipients.ALL_STAFF
    recipient_ids: list[UUID] = Field(default_factory=list)


class CountData(BaseModel):
    count: int


class AcceptedRoleData(BaseModel):
    role: StaffRole
    label: str


NotificationResponse = APIResponse[NotificationModel]
NotificationListResponse = APIResponse[list[NotificationModel]]
CountResponse = APIResponse[CountData]
AcceptedRoleResponse = APIResponse[AcceptedRoleData]
