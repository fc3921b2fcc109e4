"""Frames exchanged over ``/ws``.

Client to server: ``{"type": "ping"}``. Anything else is answered with an
``error`` frame. Server to client: ``pong``, ``error`` and the
``message.*`` events, whose ``data`` is the serialized message.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from direct_chat.domain.value_objects.enums import ChatEvent


class WsInbound(BaseModel):
    type: str = Field(min_length=1, max_length=64)
    data: dict[str, Any] = Field(default_factory=dict)


class WsOutbound(BaseModel):
    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def pong(cls) -> WsOutbound:
        return cls(type="pong")

    @classmethod
    def error(cls, code: str, **extra: Any) -> WsOutbound:
        return cls(type="error", data={"code": code, **extra})

    @classmethod
    def message_event(cls, event: ChatEvent | str, message: dict[str, Any]) -> WsOutbound:
        return cls(type=ChatEvent(event).value, data=message)
