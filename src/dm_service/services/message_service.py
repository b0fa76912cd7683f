from __future__ import annotations

import logging
import uuid
from datetime import datetime

from dm_service.application.dto.page import Page, PageRequest
from dm_service.application.dto.principal import Principal
from dm_service.application.dto.upload import UploadDTO
from dm_service.application.dto.views import MessageView
from dm_service.application.exceptions import (
    InvalidRequestError,
    NotFoundOrForbiddenError,
    StoreUnavailableError,
)
from dm_service.application.policies.messages import normalize_content, resolve_expiry
from dm_service.application.policies.permissions import load_accessible_chat
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.ports.notifications import NotificationQueue
from dm_service.application.ports.storage import AttachmentStorage
from dm_service.application.uow import UnitOfWork
from dm_service.domain.entities.message import Attachment, Message
from dm_service.domain.entities.user import UserProjection
from dm_service.domain.events.message_created import MessageCreated
from dm_service.services import notification_service

logger = logging.getLogger(__name__)

_clock = SystemClock()


async def send_message(
    chat_id: uuid.UUID,
    principal: Principal,
    content: str | None,
    temporary: bool,
    expires_at: datetime | None,
    uow: UnitOfWork,
    notifications: NotificationQueue,
    clock: Clock = _clock,
) -> MessageView:
    """Validate, persist, bump the chat timestamp, then fan out notifications.

    The message and the chat timestamp are committed separately. If the second
    write fails the message stays and last_message_at is left stale until the
    next send.
    """
    chat = await load_accessible_chat(chat_id, principal, uow.chats)
    text = normalize_content(content)
    sent_at = clock.now()
    expiry = resolve_expiry(temporary, expires_at, sent_at)

    users = await uow.directory.project([principal.user_id])
    sender = users.get(principal.user_id) or UserProjection.unknown(principal.user_id)

    msg = await uow.messages_w.create(
        Message(
            id=uuid.uuid4(),
            chat_id=chat.id,
            sender_id=principal.user_id,
            content=text,
            sent_at=sent_at,
            temporary=expiry is not None,
            expires_at=expiry,
        )
    )
    await uow.commit()

    try:
        await uow.chats_w.touch_last_message_at(chat.id, msg.sent_at)
        await uow.commit()
    except StoreUnavailableError:
        logger.warning(
            "last_message_at of chat %s not updated after message %s",
            chat.id, msg.id, exc_info=True,
        )
        await uow.rollback()

    notification_service.fan_out_message_created(
        MessageCreated(
            message_id=msg.id,
            chat_id=chat.id,
            sender_id=principal.user_id,
            sender_display_name=sender.display_name,
            recipient_ids=tuple(chat.other_participants(principal.user_id)),
        ),
        notifications,
    )
    return MessageView.of(msg, {sender.id: sender})


async def list_messages(
    chat_id: uuid.UUID,
    principal: Principal,
    page: int,
    page_size: int,
    uow: UnitOfWork,
    clock: Clock = _clock,
) -> Page[MessageView]:
    """Page through visible messages.

    Pages are cut newest first so page 1 holds the latest messages; each page
    is returned oldest first so it reads as a conversation.
    """
    chat = await load_accessible_chat(chat_id, principal, uow.chats)
    now = clock.now()
    request = PageRequest.clamp(page, page_size)

    newest_first = await uow.messages.list_visible(
        chat.id, now, offset=request.offset, limit=request.page_size,
    )
    total = await uow.messages.count_visible(chat.id, now)
    users = await uow.directory.project({m.sender_id for m in newest_first})
    items = [MessageView.of(m, users) for m in reversed(newest_first)]
    return Page.build(items, request, total)


async def mark_read(
    chat_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    clock: Clock = _clock,
) -> int:
    chat = await load_accessible_chat(chat_id, principal, uow.chats)
    updated = await uow.messages_w.mark_read(chat.id, principal.user_id, clock.now())
    await uow.commit()
    return updated


async def delete_message(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    deleted = await uow.messages_w.delete_by_sender(message_id, principal.user_id)
    if not deleted:
        raise NotFoundOrForbiddenError("Message not found or you are not allowed to delete it")
    await uow.commit()
    logger.info("Message %s deleted by its sender %d", message_id, principal.user_id)


async def attach_files(
    chat_id: uuid.UUID,
    message_id: uuid.UUID,
    principal: Principal,
    uploads: list[UploadDTO],
    uow: UnitOfWork,
    storage: AttachmentStorage,
) -> list[Attachment]:
    """Store uploads and append them to the caller's own message."""
    if not uploads:
        raise InvalidRequestError("No files received")

    msg = await uow.messages.get_by_id(message_id)
    if msg is None or msg.chat_id != chat_id or msg.sender_id != principal.user_id:
        raise NotFoundOrForbiddenError("Message not found or access denied")

    storage.validate(uploads)
    attachments: list[Attachment] = []
    try:
        for upload in uploads:
            stored = await storage.store(upload)
            attachments.append(
                Attachment(
                    url=stored.path,
                    original_name=upload.filename,
                    stored_name=stored.stored_name,
                    content_type=stored.content_type,
                    size=stored.size,
                )
            )
        updated = await uow.messages_w.append_attachments(msg.id, attachments)
        await uow.commit()
    except Exception:
        await _discard_stored(storage, attachments)
        raise
    return list(updated.attachments)


async def _discard_stored(storage: AttachmentStorage, attachments: list[Attachment]) -> None:
    """Best-effort removal of files that never made it onto a message."""
    for attachment in attachments:
        if attachment.stored_name is None:
            continue
        try:
            await storage.discard(attachment.stored_name)
        except OSError:
            logger.warning("Could not remove orphaned upload %s", attachment.stored_name, exc_info=True)
