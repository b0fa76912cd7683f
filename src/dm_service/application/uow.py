from __future__ import annotations

from typing import Protocol

from dm_service.application.ports.identity import UserDirectory
from dm_service.application.repositories.chat import ChatReader, ChatWriter
from dm_service.application.repositories.message import MessageReader, MessageWriter


class UnitOfWork(Protocol):
    chats: ChatReader
    chats_w: ChatWriter
    messages: MessageReader
    messages_w: MessageWriter
    directory: UserDirectory

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
