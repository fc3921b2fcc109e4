"""Live-update feed consumed by the chat store.

Events are ``(event_type, data)`` pairs where ``data`` is a serialized
message, the same shape the server pushes over ``/ws``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

FeedListener = Callable[[str, dict[str, Any]], None]


class MessageFeed(Protocol):
    def add_listener(self, listener: FeedListener) -> None: ...

    def remove_listener(self, listener: FeedListener) -> None: ...


class LocalFeed:
    """In-process feed: whatever is published is delivered to current listeners."""

    def __init__(self) -> None:
        self._listeners: list[FeedListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: FeedListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: FeedListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event_type: str, data: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event_type, data)
            except Exception:
                logger.exception("Feed listener failed on %s", event_type)
