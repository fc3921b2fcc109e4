"""Client-side message store for the selected conversation.

The store owns the message list of one conversation at a time and is the
only thing that talks to :class:`ChatApi` for messages. Views read its
attributes and register a listener to learn about changes.

Contract:

* ``messages`` always belongs to one peer. Selecting or fetching another
  peer clears it first, so a failed fetch never leaves the previous
  conversation on screen.
* ``get_messages(peer_id)`` toggles ``is_messages_loading`` and replaces
  ``messages``. A response is applied only if it belongs to the latest
  fetch and ``peer_id`` is still the selected peer; otherwise it is dropped.
  A failed re-fetch of the same peer keeps the current list.
* ``send_message`` appends the created message only while its peer is
  still selected.
* ``update_message`` / ``delete_message`` resolve once the server confirmed
  the change, after the message in ``messages`` was replaced by the
  server's version. They raise :class:`ChatApiError` on failure and leave
  ``messages`` untouched.
* ``subscribe_to_messages`` / ``unsubscribe_from_messages`` are idempotent:
  at most one feed listener is registered per store.
"""
from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import UUID

from direct_chat.client.api import ChatApi
from direct_chat.client.errors import ChatApiError, ChatClientError
from direct_chat.client.feed import MessageFeed
from direct_chat.client.models import ChatMessage, ChatUser
from direct_chat.domain.value_objects.enums import ChatEvent

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChatStore:
    def __init__(self, api: ChatApi, feed: MessageFeed) -> None:
        self._api = api
        self._feed = feed
        self._listeners: list[Listener] = []
        self._generation = 0
        self._subscribed = False
        # peer whose conversation ``messages`` currently holds
        self._messages_peer_id: UUID | None = None

        self.users: list[ChatUser] = []
        self.selected_user: ChatUser | None = None
        self.messages: list[ChatMessage] = []
        # bumped on every change to ``messages``
        self.messages_version = 0
        self.is_users_loading = False
        self.is_messages_loading = False

    # listener registry

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _set_messages(self, messages: list[ChatMessage]) -> None:
        self.messages = messages
        self.messages_version += 1

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed

    # state

    def set_selected_user(self, user: ChatUser | None) -> None:
        self.selected_user = user
        self._hold(user.id if user is not None else None)
        self._notify()

    def _hold(self, peer_id: UUID | None) -> None:
        if peer_id != self._messages_peer_id:
            self._messages_peer_id = peer_id
            self._set_messages([])

    async def get_users(self) -> None:
        self.is_users_loading = True
        self._notify()
        try:
            self.users = await self._api.get_users()
        except ChatApiError as exc:
            logger.warning("Failed to load users: %s", exc)
        finally:
            self.is_users_loading = False
            self._notify()

    async def get_messages(self, peer_id: UUID) -> None:
        self._generation += 1
        generation = self._generation
        self._hold(peer_id)
        self.is_messages_loading = True
        self._notify()

        try:
            messages: list[ChatMessage] | None = await self._api.get_messages(peer_id)
        except ChatApiError as exc:
            logger.warning("Failed to load messages with %s: %s", peer_id, exc)
            messages = None

        if generation != self._generation:
            logger.debug("Dropping stale history for %s", peer_id)
            return
        if not self._is_selected(peer_id):
            logger.debug("Dropping history for deselected peer %s", peer_id)
            self.is_messages_loading = False
            self._notify()
            return

        if messages is not None:
            self._set_messages(messages)
        self.is_messages_loading = False
        self._notify()

    def _is_selected(self, peer_id: UUID) -> bool:
        return self.selected_user is not None and self.selected_user.id == peer_id

    async def send_message(
        self,
        *,
        text: str | None = None,
        image: str | None = None,
        client_msg_id: UUID | None = None,
    ) -> ChatMessage:
        peer = self.selected_user
        if peer is None:
            raise ChatClientError("No conversation selected")
        msg = await self._api.send_message(
            peer.id, text=text, image=image, client_msg_id=client_msg_id,
        )
        if not self._is_selected(peer.id) or self._messages_peer_id != peer.id:
            logger.debug("Conversation with %s closed before send %s returned", peer.id, msg.id)
            return msg
        if not any(m.id == msg.id for m in self.messages):
            self._set_messages([*self.messages, msg])
            self._notify()
        return msg

    async def update_message(self, message_id: UUID, text: str) -> ChatMessage:
        msg = await self._api.update_message(message_id, text)
        self._replace(msg)
        return msg

    async def delete_message(self, message_id: UUID) -> ChatMessage:
        msg = await self._api.delete_message(message_id)
        self._replace(msg)
        return msg

    def _replace(self, msg: ChatMessage) -> bool:
        for i, current in enumerate(self.messages):
            if current.id == msg.id:
                messages = list(self.messages)
                messages[i] = msg
                self._set_messages(messages)
                self._notify()
                return True
        return False

    # live updates

    def subscribe_to_messages(self) -> None:
        if self._subscribed:
            return
        self._feed.add_listener(self._on_feed_event)
        self._subscribed = True

    def unsubscribe_from_messages(self) -> None:
        if not self._subscribed:
            return
        self._feed.remove_listener(self._on_feed_event)
        self._subscribed = False

    def _on_feed_event(self, event_type: str, data: dict[str, Any]) -> None:
        peer = self.selected_user
        if peer is None:
            return
        msg = ChatMessage.model_validate(data)

        if event_type == ChatEvent.MESSAGE_CREATED:
            if peer.id not in (msg.sender_id, msg.receiver_id):
                return
            if any(m.id == msg.id for m in self.messages):
                return
            self._set_messages([*self.messages, msg])
            self._notify()
        elif event_type in (ChatEvent.MESSAGE_UPDATED, ChatEvent.MESSAGE_DELETED):
            self._replace(msg)
        else:
            logger.debug("Ignoring feed event %s", event_type)

    def close(self) -> None:
        self.unsubscribe_from_messages()
        self._listeners.clear()
