"""Import all models so they register on Base.metadata."""
from direct_chat.infrastructure.db.base import Base
from direct_chat.infrastructure.db.models.message import MessageModel
from direct_chat.infrastructure.db.models.outbox import OutboxMessageModel
from direct_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "Base",
    "MessageModel",
    "OutboxMessageModel",
    "UserModel",
]
