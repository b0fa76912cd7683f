from __future__ import annotations

from dataclasses import dataclass

from dm_service.domain.value_objects.enums import NotificationKind


@dataclass(frozen=True, slots=True)
class NotificationDTO:
    recipient_id: int
    origin_id: int
    kind: NotificationKind
    text: str
    link: str
