from __future__ import annotations

from typing import Protocol
from uuid import UUID

from direct_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_between(
        self,
        user_id: UUID,
        peer_id: UUID,
        *,
        before: str | None = None,
        limit: int = 100,
    ) -> list[Message]:
        """Latest ``limit`` messages exchanged by the two users, oldest first."""
        ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If conflict on client_msg_id → return existing."""
        ...

    async def get_by_client_msg_id(
        self,
        sender_id: UUID,
        client_msg_id: UUID,
    ) -> Message | None: ...

    async def save(self, message: Message) -> Message:
        """Persist text / edited / deleted / updated_at of an existing message."""
        ...
