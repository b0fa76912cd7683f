from __future__ import annotations

import logging
import uuid

from dm_service.application.dto.page import Page, PageRequest
from dm_service.application.dto.principal import Principal
from dm_service.application.dto.views import ChatView
from dm_service.application.exceptions import InvalidRequestError, ParticipantsInvalidError
from dm_service.application.policies.permissions import load_accessible_chat
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.domain.entities.chat import Chat, canonical_pair

logger = logging.getLogger(__name__)

_clock = SystemClock()


async def create_or_get_chat(
    principal: Principal,
    other_user_id: int | None,
    uow: UnitOfWork,
    clock: Clock = _clock,
) -> ChatView:
    """Return the active chat between the caller and other_user_id, creating it if needed.

    Idempotent per unordered pair: (A, B) and (B, A) resolve to the same chat.
    """
    if other_user_id is None:
        raise InvalidRequestError("The other participant's user id is required")
    if other_user_id == principal.user_id:
        raise InvalidRequestError("You cannot start a chat with yourself")

    pair = canonical_pair(principal.user_id, other_user_id)
    active = await uow.directory.filter_active(pair)
    if len(active) != 2:
        raise ParticipantsInvalidError("One or both users do not exist or are inactive")

    existing = await uow.chats.get_active_by_pair(*pair)
    if existing is not None:
        return await _to_view(existing, uow)

    now = clock.now()
    chat = Chat(
        id=uuid.uuid4(),
        participant_ids=pair,
        active=True,
        last_message_at=now,
        created_at=now,
        updated_at=now,
    )
    chat, created = await uow.chats_w.create_if_absent(chat)
    if created:
        await uow.commit()
        logger.info("Created chat %s between users %d and %d", chat.id, *pair)
    else:
        logger.debug("Concurrent create for pair %s resolved to chat %s", pair, chat.id)
    return await _to_view(chat, uow)


async def list_chats(
    principal: Principal,
    page: int,
    page_size: int,
    uow: UnitOfWork,
) -> Page[ChatView]:
    request = PageRequest.clamp(page, page_size)
    chats = await uow.chats.list_for_user(
        principal.user_id, offset=request.offset, limit=request.page_size,
    )
    total = await uow.chats.count_for_user(principal.user_id)
    users = await uow.directory.project({uid for c in chats for uid in c.participant_ids})
    return Page.build([ChatView.of(c, users) for c in chats], request, total)


async def get_chat(
    chat_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> ChatView:
    chat = await load_accessible_chat(chat_id, principal, uow.chats)
    return await _to_view(chat, uow)


async def delete_chat(
    chat_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    """Soft-delete. The chat disappears from every lookup and listing."""
    chat = await load_accessible_chat(chat_id, principal, uow.chats)
    await uow.chats_w.deactivate(chat.id)
    await uow.commit()
    logger.info("Chat %s deactivated by user %d", chat.id, principal.user_id)


async def _to_view(chat: Chat, uow: UnitOfWork) -> ChatView:
    users = await uow.directory.project(chat.participant_ids)
    return ChatView.of(chat, users)
