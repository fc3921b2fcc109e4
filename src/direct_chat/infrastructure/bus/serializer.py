"""Wire format of the fan-out channel: ``{"event": <ChatEvent>, "data": {...}}``."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from direct_chat.domain.value_objects.enums import ChatEvent


class BusEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    event: ChatEvent
    data: dict[str, Any]


def serialize_event(event_type: str, payload: dict[str, Any]) -> str:
    """UUIDs and datetimes inside ``payload`` are written as strings."""
    return BusEnvelope(event=ChatEvent(event_type), data=payload).model_dump_json()


def deserialize_event(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    """Raises ``ValueError`` (pydantic's ``ValidationError``) on anything that is not an envelope."""
    envelope = BusEnvelope.model_validate_json(raw)
    return envelope.event.value, envelope.data
