"""Import all models so Base.metadata knows every table."""
from dm_service.infrastructure.db.models.chat import ChatModel
from dm_service.infrastructure.db.models.message import MessageModel
from dm_service.infrastructure.db.models.user import UserModel

__all__ = [
    "ChatModel",
    "MessageModel",
    "UserModel",
]
