from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None
    image: str | None
    client_msg_id: UUID | None
    deleted: bool
    edited: bool
    created_at: datetime
    updated_at: datetime

    def involves(self, user_id: UUID) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def with_text(self, text: str | None, ts: datetime) -> Message:
        return replace(self, text=text, edited=True, updated_at=ts)

    def as_deleted(self, ts: datetime) -> Message:
        return replace(self, deleted=True, updated_at=ts)
