from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Chat:
    id: UUID
    participant_ids: tuple[int, int]
    active: bool
    last_message_at: datetime
    created_at: datetime
    updated_at: datetime

    def other_participants(self, user_id: int) -> list[int]:
        return [p for p in self.participant_ids if p != user_id]


def canonical_pair(a: int, b: int) -> tuple[int, int]:
    """Order-independent identity of a two-participant chat."""
    return (a, b) if a < b else (b, a)
