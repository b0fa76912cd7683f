from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageCreated:
    message_id: UUID
    chat_id: UUID
    sender_id: int
    sender_display_name: str
    recipient_ids: tuple[int, ...]
