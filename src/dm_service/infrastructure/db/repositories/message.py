from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.application.exceptions import NotFoundOrForbiddenError
from dm_service.domain.entities.message import Attachment, Message
from dm_service.infrastructure.db.errors import translate_db_errors
from dm_service.infrastructure.db.mappers import message as mapper
from dm_service.infrastructure.db.models.message import MessageModel


def _visible(now: datetime):
    """Expired temporary messages are hidden whether or not they have been reaped."""
    return or_(MessageModel.temporary.is_(False), MessageModel.expires_at > now)


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_db_errors
    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    @translate_db_errors
    async def list_visible(
        self,
        chat_id: UUID,
        now: datetime,
        *,
        offset: int,
        limit: int,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.chat_id == chat_id, _visible(now))
            .order_by(MessageModel.sent_at.desc(), MessageModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    @translate_db_errors
    async def count_visible(self, chat_id: UUID, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(MessageModel)
            .where(MessageModel.chat_id == chat_id, _visible(now))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_db_errors
    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    @translate_db_errors
    async def mark_read(self, chat_id: UUID, reader_id: int, read_at: datetime) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.chat_id == chat_id,
                MessageModel.sender_id != reader_id,
                MessageModel.read.is_(False),
            )
            .values(read=True, read_at=read_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    @translate_db_errors
    async def delete_by_sender(self, message_id: UUID, sender_id: int) -> bool:
        stmt = (
            delete(MessageModel)
            .where(MessageModel.id == message_id, MessageModel.sender_id == sender_id)
            .returning(MessageModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @translate_db_errors
    async def append_attachments(
        self, message_id: UUID, attachments: list[Attachment]
    ) -> Message:
        model = await self._session.get(MessageModel, message_id, with_for_update=True)
        if model is None:
            raise NotFoundOrForbiddenError("Message not found or access denied")
        model.attachments = [
            *(model.attachments or []),
            *(mapper.attachment_to_dict(a) for a in attachments),
        ]
        await self._session.flush()
        return mapper.model_to_entity(model)

    @translate_db_errors
    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(MessageModel).where(
            MessageModel.temporary.is_(True),
            MessageModel.expires_at < now,
        )
        result = await self._session.execute(stmt)
        return result.rowcount
