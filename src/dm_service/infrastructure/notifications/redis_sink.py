from __future__ import annotations

from dataclasses import asdict

from dm_service.application.dto.notification import NotificationDTO
from dm_service.application.ports.notifications import EventPublisher

EVENT_TYPE = "notification.create"


class RedisNotificationSink:
    """Hands notification writes to the notification store via a Redis channel."""

    def __init__(self, publisher: EventPublisher, channel: str) -> None:
        self._publisher = publisher
        self._channel = channel

    async def write(self, notification: NotificationDTO) -> None:
        await self._publisher.publish(
            self._channel,
            {"event_type": EVENT_TYPE, **asdict(notification)},
        )
