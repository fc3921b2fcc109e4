from __future__ import annotations

from direct_chat.domain.entities.message import Message
from direct_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        text=model.text,
        image=model.image,
        client_msg_id=model.client_msg_id,
        deleted=model.deleted,
        edited=model.edited,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Message) -> dict:
    """Column values for an INSERT of ``entity``."""
    return {
        "id": entity.id,
        "sender_id": entity.sender_id,
        "receiver_id": entity.receiver_id,
        "text": entity.text,
        "image": entity.image,
        "client_msg_id": entity.client_msg_id,
        "deleted": entity.deleted,
        "edited": entity.edited,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }
