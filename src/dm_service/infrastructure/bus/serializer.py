"""JSON envelope for events handed to other services over Redis."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


def serialize_event(
    event_type: str,
    payload: dict[str, Any],
    *,
    emitted_at: datetime | None = None,
) -> str:
    envelope = {
        "event": event_type,
        "emitted_at": emitted_at or datetime.now(timezone.utc),
        "data": payload,
    }
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    data = json.loads(raw)
    return data["event"], data["data"]
