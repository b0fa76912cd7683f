"""Redis Pub/Sub publish side."""
from __future__ import annotations

from typing import Any

import redis.asyncio as aioredis

from dm_service.infrastructure.bus.serializer import serialize_event


class RedisPubSubPublisher:
    """Implements application.ports.notifications.EventPublisher."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(payload.get("event_type", "unknown"), payload)
        await self._redis.publish(channel, raw)
