from __future__ import annotations

from typing import Any

from dm_service.domain.entities.message import Attachment, Message
from dm_service.infrastructure.db.models.message import MessageModel


def attachment_to_dict(attachment: Attachment) -> dict[str, Any]:
    return {
        "url": attachment.url,
        "original_name": attachment.original_name,
        "stored_name": attachment.stored_name,
        "content_type": attachment.content_type,
        "size": attachment.size,
    }


def attachment_from_dict(raw: dict[str, Any]) -> Attachment:
    return Attachment(
        url=raw["url"],
        original_name=raw.get("original_name"),
        stored_name=raw.get("stored_name"),
        content_type=raw.get("content_type"),
        size=raw.get("size"),
    )


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        chat_id=model.chat_id,
        sender_id=model.sender_id,
        content=model.content,
        sent_at=model.sent_at,
        read=model.read,
        read_at=model.read_at,
        temporary=model.temporary,
        expires_at=model.expires_at,
        attachments=tuple(attachment_from_dict(a) for a in model.attachments or []),
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        chat_id=entity.chat_id,
        sender_id=entity.sender_id,
        content=entity.content,
        sent_at=entity.sent_at,
        read=entity.read,
        read_at=entity.read_at,
        temporary=entity.temporary,
        expires_at=entity.expires_at,
        attachments=[attachment_to_dict(a) for a in entity.attachments],
    )
