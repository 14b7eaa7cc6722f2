from typing import Annotated, AsyncGenerator

import redis.asyncio as redis
from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import PharmaStockException
from src.api.core.messages import MessageCode
from src.core.context import AuthContext
from src.redis.client import get_redis_client
from src.services.notification import NotificationEventPublisher, NotificationService
from src.services.role_request import RoleChangeWorkflow
from src.services.staff import StaffService


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_notification_publisher(
    redis_client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> NotificationEventPublisher:
    """Get the realtime publisher for notification events."""
    return NotificationEventPublisher(redis_client)


async def get_notification_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    publisher: Annotated[
        NotificationEventPublisher, Depends(get_notification_publisher)
    ],
) -> NotificationService:
    """Get notification service with database session."""
    return NotificationService(db, publisher)


async def get_role_change_workflow(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    publisher: Annotated[
        NotificationEventPublisher, Depends(get_notification_publisher)
    ],
) -> RoleChangeWorkflow:
    """Get role change workflow with database session."""
    return RoleChangeWorkflow(db, publisher)


async def get_staff_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> StaffService:
    """Get staff service with database session."""
    return StaffService(db)


async def get_current_auth(request: Request) -> AuthContext:
    """Dependency to get the caller's AuthContext.

    Assumes auth middleware has set request.state.auth.
    """
    auth_context = getattr(request.state, "auth", None)
    if auth_context is None:
        raise PharmaStockException(MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED)
    return auth_context


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
RedisDep = Annotated[redis.Redis, Depends(get_redis_client)]
NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]
RoleChangeWorkflowDep = Annotated[
    RoleChangeWorkflow, Depends(get_role_change_workflow)
]
StaffServiceDep = Annotated[StaffService, Depends(get_staff_service)]

CurrentAuthDep = Annotated[AuthContext, Depends(get_current_auth)]
