from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.application.dto.principal import Principal
from direct_chat.application.exceptions import NotFoundError, ValidationError
from direct_chat.application.policies.permissions import assert_message_owner
from direct_chat.application.uow import UnitOfWork
from direct_chat.domain.entities.message import Message
from direct_chat.domain.value_objects.enums import ChatEvent


def _clean_text(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip() or None


def message_event_payload(msg: Message) -> dict[str, Any]:
    """Outbox payload: the serialized message plus the users to notify."""
    return {
        "user_ids": [str(msg.sender_id), str(msg.receiver_id)],
        "message": {
            "id": str(msg.id),
            "sender_id": str(msg.sender_id),
            "receiver_id": str(msg.receiver_id),
            "text": msg.text,
            "image": msg.image,
            "client_msg_id": str(msg.client_msg_id) if msg.client_msg_id else None,
            "deleted": msg.deleted,
            "edited": msg.edited,
            "created_at": msg.created_at.isoformat(),
            "updated_at": msg.updated_at.isoformat(),
        },
    }


async def send_message(
    principal: Principal,
    data: SendMessageDTO,
    uow: UnitOfWork,
) -> tuple[Message, bool]:
    """Create a message to ``data.receiver_id``.

    Returns (message, created). When ``client_msg_id`` is given and the
    sender already used it, the existing message is returned with
    created=False and nothing is written.
    """
    text = _clean_text(data.text)
    image = data.image or None
    if text is None and image is None:
        raise ValidationError("Message must have text or an image")
    if data.receiver_id == principal.user_id:
        raise ValidationError("Cannot send a message to yourself")

    receiver = await uow.users.get_by_id(data.receiver_id)
    if receiver is None:
        raise NotFoundError("User not found")

    now = datetime.now(timezone.utc)
    msg = Message(
        id=uuid.uuid4(),
        sender_id=principal.user_id,
        receiver_id=receiver.id,
        text=text,
        image=image,
        client_msg_id=data.client_msg_id,
        deleted=False,
        edited=False,
        created_at=now,
        updated_at=now,
    )

    msg, created = await uow.messages_w.create_if_not_exists(msg)

    if created:
        await uow.outbox.add(ChatEvent.MESSAGE_CREATED, message_event_payload(msg))
        await uow.commit()

    return msg, created


async def list_messages(
    principal: Principal,
    peer_id: uuid.UUID,
    before: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    return await uow.messages.list_between(
        principal.user_id, peer_id, before=before, limit=limit,
    )


async def update_message(
    principal: Principal,
    message_id: uuid.UUID,
    text: str,
    uow: UnitOfWork,
) -> Message:
    """Replace the text of one of the caller's messages.

    An edit that would leave the message with neither text nor image is
    rejected.
    """
    message = await uow.messages.get_by_id(message_id)
    message = assert_message_owner(principal, message)
    if message.deleted:
        raise NotFoundError("Message not found or deleted")

    new_text = _clean_text(text)
    if new_text is None and message.image is None:
        raise ValidationError("Message must have text or an image")

    updated = await uow.messages_w.save(
        message.with_text(new_text, datetime.now(timezone.utc)),
    )
    await uow.outbox.add(ChatEvent.MESSAGE_UPDATED, message_event_payload(updated))
    await uow.commit()
    return updated


async def delete_message(
    principal: Principal,
    message_id: uuid.UUID,
    uow: UnitOfWork,
) -> Message:
    """Flag one of the caller's messages as deleted.

    Deleting an already deleted message returns it unchanged.
    """
    message = await uow.messages.get_by_id(message_id)
    message = assert_message_owner(principal, message)
    if message.deleted:
        return message

    deleted = await uow.messages_w.save(message.as_deleted(datetime.now(timezone.utc)))
    await uow.outbox.add(ChatEvent.MESSAGE_DELETED, message_event_payload(deleted))
    await uow.commit()
    return deleted
