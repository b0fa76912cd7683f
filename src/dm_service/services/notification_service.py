from __future__ import annotations

import logging

from dm_service.application.dto.notification import NotificationDTO
from dm_service.application.ports.notifications import NotificationQueue
from dm_service.domain.events.message_created import MessageCreated
from dm_service.domain.value_objects.enums import NotificationKind

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 200
MAX_LINK_LENGTH = 500


def build_message_notifications(event: MessageCreated) -> list[NotificationDTO]:
    text = f"New message from {event.sender_display_name}"[:MAX_TEXT_LENGTH]
    link = f"/chat/{event.chat_id}"[:MAX_LINK_LENGTH]
    return [
        NotificationDTO(
            recipient_id=recipient_id,
            origin_id=event.sender_id,
            kind=NotificationKind.DIRECT_MESSAGE,
            text=text,
            link=link,
        )
        for recipient_id in event.recipient_ids
        if recipient_id != event.sender_id
    ]


def fan_out_message_created(event: MessageCreated, queue: NotificationQueue) -> int:
    """Enqueue one notification per recipient. Never raises; returns the number queued."""
    try:
        queued = 0
        for notification in build_message_notifications(event):
            if queue.enqueue(notification):
                queued += 1
        return queued
    except Exception:
        logger.exception("Notification fan-out failed for message %s", event.message_id)
        return 0
