"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from dm_service.application.dto.notification import NotificationDTO
from dm_service.application.dto.principal import Principal
from dm_service.application.dto.upload import StoredObject, UploadDTO
from dm_service.application.exceptions import (
    InvalidRequestError,
    NotFoundOrForbiddenError,
    StoreUnavailableError,
)
from dm_service.domain.entities.chat import Chat, canonical_pair
from dm_service.domain.entities.message import Attachment, Message
from dm_service.domain.entities.user import UserProjection

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def is_visible(message: Message, now: datetime) -> bool:
    """Same predicate MessageReaderRepo applies in SQL."""
    return not message.temporary or (message.expires_at is not None and message.expires_at > now)


def is_expired(message: Message, now: datetime) -> bool:
    """Same predicate MessageWriterRepo.delete_expired applies in SQL."""
    return message.temporary and message.expires_at is not None and message.expires_at < now


@dataclass
class FrozenClock:
    current: datetime = T0

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def alice() -> Principal:
    return Principal(user_id=42)


@pytest.fixture
def bob() -> Principal:
    return Principal(user_id=43)


@pytest.fixture
def mallory() -> Principal:
    return Principal(user_id=99)


def make_chat(
    a: int = 42,
    b: int = 43,
    *,
    chat_id: UUID | None = None,
    active: bool = True,
    last_message_at: datetime = T0,
) -> Chat:
    return Chat(
        id=chat_id or uuid.uuid4(),
        participant_ids=canonical_pair(a, b),
        active=active,
        last_message_at=last_message_at,
        created_at=T0,
        updated_at=T0,
    )


def make_message(
    chat_id: UUID,
    *,
    sender_id: int = 42,
    content: str = "hello",
    sent_at: datetime = T0,
    temporary: bool = False,
    expires_at: datetime | None = None,
    read: bool = False,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        chat_id=chat_id,
        sender_id=sender_id,
        content=content,
        sent_at=sent_at,
        temporary=temporary,
        expires_at=expires_at,
        read=read,
    )


@dataclass
class FakeChatReader:
    _store: dict[UUID, Chat] = field(default_factory=dict)

    def add(self, chat: Chat) -> Chat:
        self._store[chat.id] = chat
        return chat

    async def get_active_for_participant(self, chat_id: UUID, user_id: int) -> Chat | None:
        chat = self._store.get(chat_id)
        if chat and chat.active and user_id in chat.participant_ids:
            return chat
        return None

    async def get_active_by_pair(self, user_a: int, user_b: int) -> Chat | None:
        pair = canonical_pair(user_a, user_b)
        for chat in self._store.values():
            if chat.active and chat.participant_ids == pair:
                return chat
        return None

    def _for_user(self, user_id: int) -> list[Chat]:
        chats = [c for c in self._store.values() if c.active and user_id in c.participant_ids]
        return sorted(chats, key=lambda c: c.last_message_at, reverse=True)

    async def list_for_user(self, user_id: int, *, offset: int, limit: int) -> list[Chat]:
        return self._for_user(user_id)[offset:offset + limit]

    async def count_for_user(self, user_id: int) -> int:
        return len(self._for_user(user_id))


@dataclass
class FakeChatWriter:
    _reader: FakeChatReader
    fail_touch: bool = False

    async def create_if_absent(self, chat: Chat) -> tuple[Chat, bool]:
        for existing in self._reader._store.values():
            if existing.active and existing.participant_ids == chat.participant_ids:
                return existing, False
        return self._reader.add(chat), True

    async def touch_last_message_at(self, chat_id: UUID, ts: datetime) -> None:
        if self.fail_touch:
            raise StoreUnavailableError("Storage temporarily unavailable")
        chat = self._reader._store[chat_id]
        if chat.last_message_at < ts:
            self._reader._store[chat_id] = dataclasses.replace(chat, last_message_at=ts)

    async def deactivate(self, chat_id: UUID) -> None:
        chat = self._reader._store[chat_id]
        self._reader._store[chat_id] = dataclasses.replace(chat, active=False)


@dataclass
class FakeMessageReader:
    _messages: dict[UUID, Message] = field(default_factory=dict)

    def add(self, message: Message) -> Message:
        self._messages[message.id] = message
        return message

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._messages.get(message_id)

    def _visible(self, chat_id: UUID, now: datetime) -> list[Message]:
        msgs = [m for m in self._messages.values() if m.chat_id == chat_id and is_visible(m, now)]
        return sorted(msgs, key=lambda m: m.sent_at, reverse=True)

    async def list_visible(
        self, chat_id: UUID, now: datetime, *, offset: int, limit: int,
    ) -> list[Message]:
        return self._visible(chat_id, now)[offset:offset + limit]

    async def count_visible(self, chat_id: UUID, now: datetime) -> int:
        return len(self._visible(chat_id, now))


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message) -> Message:
        return self._reader.add(message)

    async def mark_read(self, chat_id: UUID, reader_id: int, read_at: datetime) -> int:
        updated = 0
        for m in list(self._reader._messages.values()):
            if m.chat_id == chat_id and m.sender_id != reader_id and not m.read:
                self._reader._messages[m.id] = dataclasses.replace(m, read=True, read_at=read_at)
                updated += 1
        return updated

    async def delete_by_sender(self, message_id: UUID, sender_id: int) -> bool:
        m = self._reader._messages.get(message_id)
        if m is None or m.sender_id != sender_id:
            return False
        del self._reader._messages[message_id]
        return True

    async def append_attachments(self, message_id: UUID, attachments: list[Attachment]) -> Message:
        m = self._reader._messages.get(message_id)
        if m is None:
            raise NotFoundOrForbiddenError("Message not found or access denied")
        updated = dataclasses.replace(m, attachments=(*m.attachments, *attachments))
        self._reader._messages[message_id] = updated
        return updated

    async def delete_expired(self, now: datetime) -> int:
        expired = [mid for mid, m in self._reader._messages.items() if is_expired(m, now)]
        for mid in expired:
            del self._reader._messages[mid]
        return len(expired)


@dataclass
class FakeDirectory:
    _users: dict[int, UserProjection] = field(default_factory=dict)
    _inactive: set[int] = field(default_factory=set)

    def add(self, user_id: int, name: str, *, active: bool = True) -> None:
        self._users[user_id] = UserProjection(id=user_id, display_name=name, handle=name.lower())
        if not active:
            self._inactive.add(user_id)

    async def filter_active(self, user_ids: Iterable[int]) -> set[int]:
        return {uid for uid in user_ids if uid in self._users and uid not in self._inactive}

    async def project(self, user_ids: Iterable[int]) -> dict[int, UserProjection]:
        return {uid: self._users[uid] for uid in set(user_ids) if uid in self._users}


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    chats: FakeChatReader = field(default_factory=FakeChatReader)
    chats_w: FakeChatWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    directory: FakeDirectory = field(default_factory=FakeDirectory)
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.chats_w is None:
            self.chats_w = FakeChatWriter(self.chats)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, *exc: object) -> None:
        if exc[0] is not None:
            await self.rollback()


@dataclass
class FakeNotifier:
    queued: list[NotificationDTO] = field(default_factory=list)

    def enqueue(self, notification: NotificationDTO) -> bool:
        self.queued.append(notification)
        return True


class FailingNotifier:
    def enqueue(self, notification: NotificationDTO) -> bool:
        raise RuntimeError("notification queue is broken")


@dataclass
class FakeStorage:
    max_files: int = 5
    stored: list[UploadDTO] = field(default_factory=list)
    discarded: list[str] = field(default_factory=list)

    def validate(self, uploads: list[UploadDTO]) -> None:
        if len(uploads) > self.max_files:
            raise InvalidRequestError(f"At most {self.max_files} files per message")

    async def store(self, upload: UploadDTO) -> StoredObject:
        self.stored.append(upload)
        name = f"chat_{len(self.stored)}-{upload.filename}"
        return StoredObject(
            stored_name=name,
            path=f"/uploads/chat/{name}",
            content_type=upload.content_type,
            size=len(upload.data),
        )

    async def discard(self, stored_name: str) -> None:
        self.discarded.append(stored_name)


@pytest.fixture
def uow() -> FakeUoW:
    uow = FakeUoW()
    uow.directory.add(42, "Alice")
    uow.directory.add(43, "Bob")
    uow.directory.add(99, "Mallory")
    return uow


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
