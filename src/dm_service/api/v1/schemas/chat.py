from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from dm_service.api.v1.schemas.user import UserProjectionResponse


class CreateChatRequest(BaseModel):
    user_id: int | None = None


class ChatResponse(BaseModel):
    id: UUID
    participants: list[UserProjectionResponse]
    last_message_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}
