"""Read models returned by the services, with users resolved to projections."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from dm_service.domain.entities.chat import Chat
from dm_service.domain.entities.message import Attachment, Message
from dm_service.domain.entities.user import UserProjection


@dataclass(frozen=True, slots=True)
class ChatView:
    id: UUID
    participants: list[UserProjection]
    last_message_at: datetime
    created_at: datetime

    @classmethod
    def of(cls, chat: Chat, users: dict[int, UserProjection]) -> ChatView:
        return cls(
            id=chat.id,
            participants=[users.get(uid) or UserProjection.unknown(uid) for uid in chat.participant_ids],
            last_message_at=chat.last_message_at,
            created_at=chat.created_at,
        )


@dataclass(frozen=True, slots=True)
class MessageView:
    id: UUID
    chat_id: UUID
    sender: UserProjection
    content: str
    sent_at: datetime
    read: bool
    read_at: datetime | None
    temporary: bool
    expires_at: datetime | None
    attachments: list[Attachment]

    @classmethod
    def of(cls, message: Message, users: dict[int, UserProjection]) -> MessageView:
        return cls(
            id=message.id,
            chat_id=message.chat_id,
            sender=users.get(message.sender_id) or UserProjection.unknown(message.sender_id),
            content=message.content,
            sent_at=message.sent_at,
            read=message.read,
            read_at=message.read_at,
            temporary=message.temporary,
            expires_at=message.expires_at,
            attachments=list(message.attachments),
        )
