from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    text: str | None = None
    image: str | None = Field(None, max_length=2048)
    client_msg_id: UUID | None = None


class UpdateMessageRequest(BaseModel):
    text: str = ""


class MessageResponse(BaseModel):
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

    model_config = {"from_attributes": True}
