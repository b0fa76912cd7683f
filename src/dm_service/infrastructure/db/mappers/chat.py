from __future__ import annotations

from dm_service.domain.entities.chat import Chat
from dm_service.infrastructure.db.models.chat import ChatModel


def model_to_entity(model: ChatModel) -> Chat:
    return Chat(
        id=model.id,
        participant_ids=(model.user_low_id, model.user_high_id),
        active=model.active,
        last_message_at=model.last_message_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Chat) -> dict[str, object]:
    low, high = entity.participant_ids
    return {
        "id": entity.id,
        "user_low_id": low,
        "user_high_id": high,
        "active": entity.active,
        "last_message_at": entity.last_message_at,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }
