from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    receiver_id: UUID
    text: str | None = None
    image: str | None = None
    client_msg_id: UUID | None = None
