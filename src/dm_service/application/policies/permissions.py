from __future__ import annotations

from uuid import UUID

from dm_service.application.dto.principal import Principal
from dm_service.application.exceptions import NotFoundOrForbiddenError
from dm_service.application.repositories.chat import ChatReader
from dm_service.domain.entities.chat import Chat


async def load_accessible_chat(
    chat_id: UUID,
    principal: Principal,
    chats: ChatReader,
) -> Chat:
    """Raise if the chat is missing, inactive, or the caller is not in it."""
    chat = await chats.get_active_for_participant(chat_id, principal.user_id)
    if chat is None:
        raise NotFoundOrForbiddenError("Chat not found or access denied")
    return chat
