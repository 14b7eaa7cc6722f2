"""Notification router: inbox, messaging, role change acceptance and realtime feed."""

import asyncio
from uuid import UUID

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from src.api.core.constants import WS_POLICY_VIOLATION
from src.api.core.decorators.auth import require_permission
from src.api.core.dependencies import (
    CurrentAuthDep,
    NotificationServiceDep,
    RoleChangeWorkflowDep,
)
from src.api.core.exceptions.base import PharmaStockException
from src.api.core.messages import APIResponse, MessageCode
from src.api.notification.schemas import (
    AcceptedRoleData,
    AcceptedRoleResponse,
    BroadcastRequest,
    CountData,
    CountResponse,
    DirectMessageRequest,
    NotificationListResponse,
    NotificationModel,
    NotificationResponse,
)
from src.database.connection import get_async_db
from src.database.models import StaffPermission
from src.redis.client import get_redis_client
from src.services.auth.handlers import handle_jwt_auth
from src.services.notification import UnreadCountStream
from src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    request: Request,
    notifications: NotificationServiceDep,
    auth: CurrentAuthDep,
    unread_only: bool = False,
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    rows = await notifications.list_for_user(auth.user_id, unread_only=unread_only)

    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=[NotificationModel.model_validate(row) for row in rows],
    )


@router.get("/unread-count", response_model=CountResponse)
async def get_unread_count(
    request: Request,
    notifications: NotificationServiceDep,
    auth: CurrentAuthDep,
) -> CountResponse:
    count = await notifications.count_unread(auth.user_id)
    return APIResponse.success(
        message_code=MessageCode.SUCCESS, data=CountData(count=count)
    )


@router.post("/read-all", response_model=CountResponse)
async def mark_all_notifications_read(
    request: Request,
    notifications: NotificationServiceDep,
    auth: CurrentAuthDep,
) -> CountResponse:
    count = await notifications.mark_all_read(auth)
    return APIResponse.success(
        message_code=MessageCode.UPDATED, data=CountData(count=count)
    )


@router.post("/direct", response_model=NotificationResponse)
@require_permission(StaffPermission.SEND_DIRECT_MESSAGE)
async def send_direct_message(
    request: Request,
    body: DirectMessageRequest,
    notifications: NotificationServiceDep,
    auth: CurrentAuthDep,
) -> NotificationResponse:
    """Send a direct message to a member of the caller's organization."""
    notification = await notifications.send_direct_message(
        auth, body.recipient_id, body.title, body.message
    )
    return APIResponse.success(
        message_code=MessageCode.NOTIFICATION_SENT,
        data=NotificationModel.model_validate(notification),
    )


@router.post("/broadcast", response_model=CountResponse)
@require_permission(StaffPermission.SEND_BROADCAST)
async def send_broadcast(
    request: Request,
    body: BroadcastRequest,
    notifications: NotificationServiceDep,
    auth: CurrentAuthDep,
) -> CountResponse:
    """Send one notification per recipient and return how many were sent."""
    count = await notifications.send_broadcast(
        auth,
        body.title,
        body.message,
        body.recipients,
        body.recipient_ids,
    )
    return APIResponse.success(
        message_code=MessageCode.BROADCAST_SENT,
        message=f"Message sent to {count} staff member{'' if count == 1 else 's'}",
        data=CountData(count=count),
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    request: Request,
    notifications: NotificationServiceDep,
    auth: CurrentAuthDep,
) -> NotificationResponse:
    notification = await notifications.mark_read(auth, notification_id)
    return APIResponse.success(
        message_code=MessageCode.NOTIFICATION_READ,
        data=NotificationModel.model_validate(notification),
    )


@router.post(
    "/{notification_id}/accept-role-change", response_model=AcceptedRoleResponse
)
async def accept_role_change(
    notification_id: UUID,
    request: Request,
    workflow: RoleChangeWorkflowDep,
    auth: CurrentAuthDep,
) -> AcceptedRoleResponse:
    """Adopt the role granted by an approved role change notification.

    Clients should refresh their cached authorization state afterwards.
    """
    role = await workflow.accept_role_change(auth, notification_id)
    return APIResponse.success(
        message_code=MessageCode.ROLE_CHANGED,
        message=f"Your role is now {role.label}",
        data=AcceptedRoleData(role=role, label=role.label),
    )


async def _send_counts(websocket: WebSocket, stream: UnreadCountStream) -> None:
    try:
        async for count in stream:
            await websocket.send_json({"unread_count": count})
    except WebSocketDisconnect:
        return


async def _receive_until_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/ws")
async def unread_count_feed(websocket: WebSocket, token: str | None = None):
    """Push the caller's unread count whenever one of their notifications changes.

    Authenticates with the 'token' query parameter and closes with 1008 when
    the token is missing or rejected.
    """
    session_factory = websocket.app.state.session_factory

    try:
        if not token:
            raise PharmaStockException(MessageCode.AUTH_REQUIRED, 401)
        async with get_async_db(session_factory) as db:
            auth_context = await handle_jwt_auth(db, token)
    except PharmaStockException as e:
        logger.info("Realtime connection rejected", message_code=e.message_code)
        await websocket.close(code=WS_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    logger.debug("Realtime connection opened", user_id=str(auth_context.user_id))

    stream = UnreadCountStream(
        session_factory, await get_redis_client(), auth_context.user_id
    )
    sender = asyncio.create_task(_send_counts(websocket, stream))
    receiver = asyncio.create_task(_receive_until_disconnect(websocket))

    done, pending = await asyncio.wait(
        {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
    )
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    logger.debug("Realtime connection closed", user_id=str(auth_context.user_id))
    for task in done:
        task.result()
