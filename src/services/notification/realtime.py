"""Realtime change feed for notifications over Redis pub/sub."""

import asyncio
import json
from enum import Enum
from typing import AsyncIterator
from uuid import UUID

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.core.constants import NOTIFICATION_CHANNEL_PREFIX
from src.database.models import Notification
from src.utils.logger import get_logger
from src.utils.settings.workflow import WorkflowSettings

logger = get_logger(__name__)


class NotificationEvent(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"


def notification_channel(user_id: UUID) -> str:
    return f"{NOTIFICATION_CHANNEL_PREFIX}:{user_id}"


class NotificationEventPublisher:
    """Publishes row change events on the recipient's channel.

    Best effort: a failed publish is logged and never fails the write that
    triggered it. Subscribers always re-derive state from the database.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    async def publish(self, event: NotificationEvent, notification: Notification) -> None:
        payload = json.dumps(
            {
                "event": event.value,
                "notification_id": str(notification.id),
                "user_id": str(notification.user_id),
            }
        )
        try:
            await self.redis_client.publish(
                notification_channel(notification.user_id), payload
            )
        except RedisError as e:
            logger.warning(
                "Failed to publish notification event",
                notification_event=event.value,
                notification_id=str(notification.id),
                error=str(e),
            )


class UnreadCountStream:
    """Async iterator over a user's unread notification count.

    Subscribes before the initial count fetch so no change between the two is
    missed, then re-queries on every event. After a connection loss it
    resubscribes and fetches the count again, since the feed only carries
    changes made after the subscribe point.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        redis_client: redis.Redis,
        user_id: UUID,
        reconnect_delay: float | None = None,
    ):
        self.session_factory = session_factory
        self.redis_client = redis_client
        self.user_id = user_id
        self.reconnect_delay = (
            reconnect_delay
            if reconnect_delay is not None
            else WorkflowSettings().REALTIME_RECONNECT_DELAY_SECONDS
        )
        self._last_count: int | None = None

    async def fetch_count(self) -> int:
        from src.services.notification.dispatcher import NotificationService

        async with self.session_factory() as db:
            return await NotificationService(db).count_unread(self.user_id)

    def __aiter__(self) -> AsyncIterator[int]:
        return self._stream()

    async def _stream(self) -> AsyncIterator[int]:
        channel = notification_channel(self.user_id)

        while True:
            pubsub = self.redis_client.pubsub()
            try:
                await pubsub.subscribe(channel)

                count = await self.fetch_count()
                if count != self._last_count:
                    self._last_count = count
                    yield count

                async for message in pubsub.listen():
                    if message.get("type") != "message":
                        continue
                    count = await self.fetch_count()
                    if count != self._last_count:
                        self._last_count = count
                        yield count

            except RedisConnectionError as e:
                logger.warning(
                    "Realtime feed disconnected, resubscribing",
                    user_id=str(self.user_id),
                    error=str(e),
                    retry_in=self.reconnect_delay,
                )
                await asyncio.sleep(self.reconnect_delay)
            finally:
                await pubsub.aclose()
