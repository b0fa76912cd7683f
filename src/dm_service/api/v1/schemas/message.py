from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from dm_service.api.v1.schemas.user import UserProjectionResponse


class SendMessageRequest(BaseModel):
    content: str | None = None
    temporary: bool = False
    expires_at: datetime | None = None


class AttachmentResponse(BaseModel):
    url: str
    original_name: str | None
    stored_name: str | None
    content_type: str | None
    size: int | None

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: UUID
    chat_id: UUID
    sender: UserProjectionResponse
    content: str
    sent_at: datetime
    read: bool
    read_at: datetime | None
    temporary: bool
    expires_at: datetime | None
    attachments: list[AttachmentResponse]

    model_config = {"from_attributes": True}


class MarkReadResponse(BaseModel):
    detail: str
    updated: int
