from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from dm_service.domain.entities.message import Attachment, Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_visible(
        self,
        chat_id: UUID,
        now: datetime,
        *,
        offset: int,
        limit: int,
    ) -> list[Message]:
        """Visible messages, newest first."""
        ...

    async def count_visible(self, chat_id: UUID, now: datetime) -> int: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def mark_read(self, chat_id: UUID, reader_id: int, read_at: datetime) -> int:
        """Mark unread messages not sent by reader_id as read. Returns rows updated."""
        ...

    async def delete_by_sender(self, message_id: UUID, sender_id: int) -> bool: ...

    async def append_attachments(
        self, message_id: UUID, attachments: list[Attachment]
    ) -> Message: ...

    async def delete_expired(self, now: datetime) -> int: ...
