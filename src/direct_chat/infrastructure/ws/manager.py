"""In-process WebSocket connection registry, keyed by user."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from fastapi import WebSocket

from direct_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks the open WebSocket connections of each user (one per tab/device)."""

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}

    async def connect(self, ws: WebSocket, user_key: str) -> None:
        await ws.accept()
        self._connections.setdefault(user_key, set()).add(ws)
        logger.debug("WS connected: %s (users online=%d)", user_key, len(self._connections))

    def disconnect(self, ws: WebSocket, user_key: str) -> None:
        conns = self._connections.get(user_key)
        if conns:
            conns.discard(ws)
            if not conns:
                del self._connections[user_key]
        logger.debug("WS disconnected: %s", user_key)

    def online_users(self) -> list[str]:
        return list(self._connections)

    async def send_to_users(
        self,
        user_keys: Iterable[str],
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        """Push one event to every connection of each listed user."""
        raw = WsOutbound.message_event(event_type, data).model_dump_json()
        dead: list[tuple[str, WebSocket]] = []
        for key in set(user_keys):
            for ws in list(self._connections.get(key, ())):
                try:
                    await ws.send_text(raw)
                except Exception:
                    dead.append((key, ws))
        for key, ws in dead:
            self.disconnect(ws, key)
