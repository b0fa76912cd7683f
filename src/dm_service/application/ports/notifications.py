from __future__ import annotations

from typing import Any, Protocol

from dm_service.application.dto.notification import NotificationDTO


class EventPublisher(Protocol):
    async def publish(self, channel: str, payload: dict[str, Any]) -> None: ...


class NotificationSink(Protocol):
    """Generic notification store owned by another service."""

    async def write(self, notification: NotificationDTO) -> None: ...


class NotificationQueue(Protocol):
    def enqueue(self, notification: NotificationDTO) -> bool:
        """Hand off without waiting. Returns False if the notification was dropped."""
        ...
