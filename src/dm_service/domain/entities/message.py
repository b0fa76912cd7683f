from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Attachment:
    url: str
    original_name: str | None = None
    stored_name: str | None = None
    content_type: str | None = None
    size: int | None = None


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    chat_id: UUID
    sender_id: int
    content: str
    sent_at: datetime
    read: bool = False
    read_at: datetime | None = None
    temporary: bool = False
    expires_at: datetime | None = None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)
