from __future__ import annotations

from enum import StrEnum


class NotificationKind(StrEnum):
    DIRECT_MESSAGE = "direct_message"
