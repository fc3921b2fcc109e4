"""Wire models the client parses API responses and live events into."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ChatUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str
    full_name: str
    profile_pic: str | None = None
    created_at: datetime | None = None


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    text: str | None = None
    image: str | None = None
    client_msg_id: UUID | None = None
    deleted: bool = False
    edited: bool = False
    created_at: datetime
    updated_at: datetime | None = None
