from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.domain.entities.chat import Chat, canonical_pair
from dm_service.infrastructure.db.errors import translate_db_errors
from dm_service.infrastructure.db.mappers import chat as mapper
from dm_service.infrastructure.db.models.chat import ChatModel


def _has_participant(user_id: int):
    return or_(ChatModel.user_low_id == user_id, ChatModel.user_high_id == user_id)


class ChatReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_db_errors
    async def get_active_for_participant(self, chat_id: UUID, user_id: int) -> Chat | None:
        stmt = select(ChatModel).where(
            ChatModel.id == chat_id,
            ChatModel.active.is_(True),
            _has_participant(user_id),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    @translate_db_errors
    async def get_active_by_pair(self, user_a: int, user_b: int) -> Chat | None:
        low, high = canonical_pair(user_a, user_b)
        stmt = select(ChatModel).where(
            ChatModel.user_low_id == low,
            ChatModel.user_high_id == high,
            ChatModel.active.is_(True),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    @translate_db_errors
    async def list_for_user(self, user_id: int, *, offset: int, limit: int) -> list[Chat]:
        stmt = (
            select(ChatModel)
            .where(ChatModel.active.is_(True), _has_participant(user_id))
            .order_by(ChatModel.last_message_at.desc(), ChatModel.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    @translate_db_errors
    async def count_for_user(self, user_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(ChatModel)
            .where(ChatModel.active.is_(True), _has_participant(user_id))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()


class ChatWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_db_errors
    async def create_if_absent(self, chat: Chat) -> tuple[Chat, bool]:
        """Insert against the partial unique index on the active pair.

        A concurrent insert for the same pair makes this a no-op; the winner's
        row is read back instead.
        """
        stmt = (
            pg_insert(ChatModel)
            .values(**mapper.entity_to_values(chat))
            .on_conflict_do_nothing(
                index_elements=["user_low_id", "user_high_id"],
                index_where=text("active"),
            )
            .returning(ChatModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            return mapper.model_to_entity(row), True

        low, high = chat.participant_ids
        stmt = select(ChatModel).where(
            ChatModel.user_low_id == low,
            ChatModel.user_high_id == high,
            ChatModel.active.is_(True),
        )
        existing = (await self._session.execute(stmt)).scalar_one()
        return mapper.model_to_entity(existing), False

    @translate_db_errors
    async def touch_last_message_at(self, chat_id: UUID, ts: datetime) -> None:
        """Only ever moves last_message_at forward."""
        stmt = (
            update(ChatModel)
            .where(ChatModel.id == chat_id, ChatModel.last_message_at < ts)
            .values(last_message_at=ts)
        )
        await self._session.execute(stmt)

    @translate_db_errors
    async def deactivate(self, chat_id: UUID) -> None:
        stmt = (
            update(ChatModel)
            .where(ChatModel.id == chat_id)
            .values(active=False)
        )
        await self._session.execute(stmt)
