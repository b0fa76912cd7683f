from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from dm_service.domain.entities.chat import Chat


class ChatReader(Protocol):
    async def get_active_for_participant(self, chat_id: UUID, user_id: int) -> Chat | None:
        """Active chat with this id that has user_id among its participants."""
        ...

    async def get_active_by_pair(self, user_a: int, user_b: int) -> Chat | None: ...

    async def list_for_user(self, user_id: int, *, offset: int, limit: int) -> list[Chat]:
        """Active chats of the user, most recent activity first."""
        ...

    async def count_for_user(self, user_id: int) -> int: ...


class ChatWriter(Protocol):
    async def create_if_absent(self, chat: Chat) -> tuple[Chat, bool]:
        """Insert chat unless an active one exists for the pair.

        Returns (chat, created). On conflict the surviving chat is returned.
        """
        ...

    async def touch_last_message_at(self, chat_id: UUID, ts: datetime) -> None:
        """Set last_message_at to ts unless it already holds a later value."""
        ...

    async def deactivate(self, chat_id: UUID) -> None: ...
