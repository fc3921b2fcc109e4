from __future__ import annotations

from direct_chat.application.dto.principal import Principal
from direct_chat.application.exceptions import ForbiddenError, NotFoundError
from direct_chat.domain.entities.message import Message


def assert_message_visible(principal: Principal, message: Message | None) -> Message:
    """Raise if the message doesn't exist or principal is not one of its two parties."""
    if message is None or not message.involves(principal.user_id):
        raise NotFoundError("Message not found")
    return message


def assert_message_owner(principal: Principal, message: Message | None) -> Message:
    message = assert_message_visible(principal, message)
    if message.sender_id != principal.user_id:
        raise ForbiddenError("Only the sender can modify this message")
    return message
