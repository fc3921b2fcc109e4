"""Live feed backed by the server's ``/ws`` endpoint.

Frames are ``{"type": ..., "data": ...}``. Message events are handed to the
registered listeners; ``pong`` and ``error`` frames are not. The connection
is re-opened with capped exponential backoff until :meth:`stop` is called.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from direct_chat.client.feed import LocalFeed
from direct_chat.domain.value_objects.enums import ChatEvent

logger = logging.getLogger(__name__)

_MESSAGE_EVENTS = frozenset(e.value for e in ChatEvent)

INITIAL_BACKOFF = 0.5
MAX_BACKOFF = 5.0


def next_backoff(current: float) -> float:
    return min(current * 2, MAX_BACKOFF)


class WebSocketFeed(LocalFeed):
    def __init__(
        self,
        ws_url: str,
        session_token: str,
        *,
        cookie_name: str = "jwt",
        heartbeat: float = 20.0,
    ) -> None:
        super().__init__()
        self._ws_url = ws_url
        self._cookies = {cookie_name: session_token}
        self._heartbeat = heartbeat
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name="chat-ws-feed")

    async def stop(self) -> None:
        self._stopping.set()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    def handle_frame(self, raw: str) -> None:
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Dropping malformed WS frame")
            return
        if not isinstance(frame, dict):
            return

        event_type = frame.get("type")
        data: Any = frame.get("data")
        if event_type in _MESSAGE_EVENTS and isinstance(data, dict):
            self.publish(event_type, data)
        elif event_type == "error":
            logger.warning("Server reported WS error: %s", data)

    async def _run(self) -> None:
        backoff = INITIAL_BACKOFF
        while not self._stopping.is_set():
            try:
                async with aiohttp.ClientSession(cookies=self._cookies) as session:
                    async with session.ws_connect(self._ws_url, heartbeat=self._heartbeat) as ws:
                        logger.info("Connected to %s", self._ws_url)
                        backoff = INITIAL_BACKOFF
                        async for msg in ws:
                            if msg.type == aiohttp.WSMsgType.TEXT:
                                self.handle_frame(msg.data)
                            elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                                break
            except aiohttp.WSServerHandshakeError as exc:
                if exc.status in (401, 403):
                    logger.error("WS handshake rejected (%s), not reconnecting", exc.status)
                    return
                logger.warning("WS handshake failed: %s", exc)
            except aiohttp.ClientError as exc:
                logger.warning("WS connection failed: %s", exc)

            await self._pause(backoff)
            backoff = next_backoff(backoff)

    async def _pause(self, seconds: float) -> None:
        """Wait before reconnecting; returns early once :meth:`stop` is called."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
