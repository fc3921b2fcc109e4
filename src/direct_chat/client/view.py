"""Chat view model: message rows, the edit slot and optimistic deletes.

Per row the state is ``normal`` or ``editing``; a single edit slot is shared
by the whole view, so entering edit mode on a row takes the slot from any
other row. Deletes are tracked locally as soon as the server confirms them,
so a row renders as deleted before the store sees a refreshed message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable
from uuid import UUID

from direct_chat.client.auth_store import AuthStore
from direct_chat.client.chat_store import ChatStore
from direct_chat.client.errors import ChatApiError
from direct_chat.client.formatting import format_message_time
from direct_chat.client.models import ChatMessage, ChatUser

logger = logging.getLogger(__name__)

DELETED_PLACEHOLDER = "This message was deleted"
DEFAULT_AVATAR = "/avatar.png"


@dataclass(frozen=True, slots=True)
class MessageRow:
    id: UUID
    is_own: bool
    is_deleted: bool
    is_editing: bool
    show_controls: bool
    text: str | None
    image: str | None
    draft: str | None
    edited: bool
    avatar: str
    time_label: str


@dataclass(frozen=True, slots=True)
class ChatScreen:
    peer: ChatUser | None
    # skeleton in place of the rows; header and input stay
    loading: bool
    rows: list[MessageRow] = field(default_factory=list)
    show_input: bool = True


class ChatView:
    def __init__(
        self,
        chat_store: ChatStore,
        auth_store: AuthStore,
        *,
        on_scroll: Callable[[UUID], None] | None = None,
        on_focus: Callable[[UUID], None] | None = None,
    ) -> None:
        self._store = chat_store
        self._auth = auth_store
        self._on_scroll = on_scroll
        self._on_focus = on_focus

        self._mounted = False
        self._remove_store_listener: Callable[[], None] | None = None
        self._active_peer_id: UUID | None = None
        self._seen_version = -1

        self.editing_message_id: UUID | None = None
        self.draft = ""
        self.local_deleted_ids: set[UUID] = set()
        self.scroll_target: UUID | None = None

    # lifecycle

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True
        self.local_deleted_ids = set()
        self._seen_version = self._store.messages_version
        self._remove_store_listener = self._store.add_listener(self._on_store_change)
        await self._sync_peer()

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._teardown_peer()
        if self._remove_store_listener is not None:
            self._remove_store_listener()
            self._remove_store_listener = None
        self._mounted = False
        self.cancel_edit()

    async def select_peer(self, user: ChatUser | None) -> None:
        self._store.set_selected_user(user)
        if self._mounted:
            await self._sync_peer()

    async def _sync_peer(self) -> None:
        peer = self._store.selected_user
        peer_id = peer.id if peer else None
        if peer_id == self._active_peer_id:
            return
        self._teardown_peer()
        if peer_id is None:
            return
        self._active_peer_id = peer_id
        self._store.subscribe_to_messages()
        await self._store.get_messages(peer_id)

    def _teardown_peer(self) -> None:
        if self._active_peer_id is None:
            return
        self._store.unsubscribe_from_messages()
        self._active_peer_id = None

    def _on_store_change(self) -> None:
        if self._store.messages_version == self._seen_version:
            return
        self._seen_version = self._store.messages_version
        if self._store.messages:
            self.scroll_target = self._store.messages[-1].id
            if self._on_scroll is not None:
                self._on_scroll(self.scroll_target)

    # edit / delete

    def click_edit(self, message: ChatMessage) -> None:
        self.editing_message_id = message.id
        self.draft = message.text or ""
        if self._on_focus is not None:
            self._on_focus(message.id)

    def set_draft(self, text: str) -> None:
        self.draft = text

    def cancel_edit(self) -> None:
        self.editing_message_id = None
        self.draft = ""

    async def save_edit(self, message: ChatMessage) -> bool:
        """Commit the draft. Returns True when the edit session was closed."""
        trimmed = self.draft.strip()
        if not trimmed and not message.image:
            return False
        try:
            await self._store.update_message(message.id, trimmed)
        except ChatApiError:
            logger.exception("Failed to update message %s", message.id)
            return False
        self.cancel_edit()
        return True

    async def delete(self, message: ChatMessage) -> bool:
        try:
            await self._store.delete_message(message.id)
        except ChatApiError:
            logger.exception("Failed to delete message %s", message.id)
            return False
        self.local_deleted_ids.add(message.id)
        if self.editing_message_id == message.id:
            self.cancel_edit()
        return True

    # rendering

    def is_deleted(self, message: ChatMessage) -> bool:
        return message.deleted or message.id in self.local_deleted_ids

    def render(self) -> ChatScreen:
        peer = self._store.selected_user
        if self._store.is_messages_loading:
            return ChatScreen(peer=peer, loading=True)
        return ChatScreen(
            peer=peer,
            loading=False,
            rows=[self._render_row(m, peer) for m in self._store.messages],
        )

    def _render_row(self, message: ChatMessage, peer: ChatUser | None) -> MessageRow:
        me = self._auth.auth_user
        is_own = me is not None and message.sender_id == me.id
        is_deleted = self.is_deleted(message)
        is_editing = self.editing_message_id == message.id

        if is_own:
            avatar = (me.profile_pic if me else None) or DEFAULT_AVATAR
        else:
            avatar = (peer.profile_pic if peer else None) or DEFAULT_AVATAR

        return MessageRow(
            id=message.id,
            is_own=is_own,
            is_deleted=is_deleted,
            is_editing=is_editing,
            show_controls=is_own and not is_deleted,
            text=DELETED_PLACEHOLDER if is_deleted else message.text,
            image=message.image,
            draft=self.draft if is_editing else None,
            edited=message.edited,
            avatar=avatar,
            time_label=format_message_time(message.created_at),
        )
