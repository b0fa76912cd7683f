"""Seed development data: two users, a chat between them and a few messages."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.dialects.postgresql import insert as pg_insert

from dm_service.domain.entities.chat import Chat, canonical_pair
from dm_service.domain.entities.message import Message
from dm_service.infrastructure.db.models.user import UserModel
from dm_service.infrastructure.db.session import AsyncSessionLocal
from dm_service.infrastructure.db.uow import SqlAlchemyUoW
from dm_service.log import configure_logging

logger = logging.getLogger(__name__)

USERS = [
    {"id": 42, "full_name": "Ana Souza", "username": "ana", "avatar_url": None},
    {"id": 43, "full_name": "Bruno Lima", "username": "bruno", "avatar_url": None},
]


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(
            pg_insert(UserModel).values(USERS).on_conflict_do_nothing(index_elements=["id"])
        )

        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)
        chat, created = await uow.chats_w.create_if_absent(
            Chat(
                id=uuid.uuid4(),
                participant_ids=canonical_pair(42, 43),
                active=True,
                last_message_at=now,
                created_at=now,
                updated_at=now,
            )
        )

        messages_data = [
            (42, "Oi! Tudo bem?", False),
            (43, "Tudo certo, e contigo?", False),
            (42, "Esta some em uma hora.", True),
        ]
        for offset, (sender_id, content, temporary) in enumerate(messages_data):
            sent_at = now + timedelta(seconds=offset)
            await uow.messages_w.create(
                Message(
                    id=uuid.uuid4(),
                    chat_id=chat.id,
                    sender_id=sender_id,
                    content=content,
                    sent_at=sent_at,
                    temporary=temporary,
                    expires_at=sent_at + timedelta(hours=1) if temporary else None,
                )
            )
        await uow.chats_w.touch_last_message_at(chat.id, now + timedelta(seconds=len(messages_data)))

        await uow.commit()
        logger.info(
            "Seeded chat %s (%s) with %d messages",
            chat.id,
            "new" if created else "existing",
            len(messages_data),
        )


def main() -> None:
    configure_logging("INFO")
    asyncio.run(seed())


if __name__ == "__main__":
    main()
