"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from direct_chat.application.dto.principal import Principal
from direct_chat.application.repositories.outbox import OutboxRecord
from direct_chat.client.errors import ChatApiError
from direct_chat.client.models import ChatMessage, ChatUser
from direct_chat.domain.entities.message import Message
from direct_chat.domain.entities.user import User
from direct_chat.infrastructure.auth.passwords import BcryptHasher

_BASE_TS = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_user(
    *,
    user_id: UUID | None = None,
    email: str | None = None,
    full_name: str = "Test User",
    password_hash: str = "",
    profile_pic: str | None = None,
) -> User:
    uid = user_id or uuid.uuid4()
    return User(
        id=uid,
        email=email or f"{uid.hex[:8]}@example.com",
        full_name=full_name,
        password_hash=password_hash,
        profile_pic=profile_pic,
        created_at=_BASE_TS,
        updated_at=_BASE_TS,
    )


def make_message(
    *,
    sender_id: UUID,
    receiver_id: UUID,
    text: str | None = "hello",
    image: str | None = None,
    deleted: bool = False,
    created_at: datetime | None = None,
) -> Message:
    ts = created_at or datetime.now(timezone.utc)
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        text=text,
        image=image,
        client_msg_id=None,
        deleted=deleted,
        edited=False,
        created_at=ts,
        updated_at=ts,
    )


def minutes(n: int) -> datetime:
    return _BASE_TS + timedelta(minutes=n)


@pytest.fixture
def hasher() -> BcryptHasher:
    return BcryptHasher(rounds=4)


@pytest.fixture
def alice() -> User:
    return make_user(full_name="Alice", email="alice@example.com")


@pytest.fixture
def bob() -> User:
    return make_user(full_name="Bob", email="bob@example.com")


@pytest.fixture
def alice_principal(alice: User) -> Principal:
    return Principal(user_id=alice.id)


@pytest.fixture
def bob_principal(bob: User) -> Principal:
    return Principal(user_id=bob.id)


@dataclass
class FakeUserReader:
    _users: dict[UUID, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        for u in self._users.values():
            if u.email == email:
                return u
        return None

    async def list_except(self, user_id: UUID) -> list[User]:
        others = [u for u in self._users.values() if u.id != user_id]
        return sorted(others, key=lambda u: (u.full_name, str(u.id)))


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader

    async def create(self, user: User) -> User:
        self._reader._users[user.id] = user
        return user

    async def set_profile_pic(self, user_id: UUID, profile_pic: str) -> User | None:
        user = self._reader._users.get(user_id)
        if user is None:
            return None
        user = replace(user, profile_pic=profile_pic)
        self._reader._users[user_id] = user
        return user


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def get_by_id(self, message_id: UUID) -> Message | None:
        for m in self._messages:
            if m.id == message_id:
                return m
        return None

    async def list_between(
        self,
        user_id: UUID,
        peer_id: UUID,
        *,
        before: str | None = None,
        limit: int = 100,
    ) -> list[Message]:
        pair = {user_id, peer_id}
        rows = [m for m in self._messages if {m.sender_id, m.receiver_id} == pair]
        rows.sort(key=lambda m: (m.created_at, str(m.id)))
        return rows[-limit:]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        if message.client_msg_id is not None:
            existing = await self.get_by_client_msg_id(message.sender_id, message.client_msg_id)
            if existing is not None:
                return existing, False
        self._reader._messages.append(message)
        return message, True

    async def get_by_client_msg_id(self, sender_id: UUID, client_msg_id: UUID) -> Message | None:
        for m in self._reader._messages:
            if m.sender_id == sender_id and m.client_msg_id == client_msg_id:
                return m
        return None

    async def save(self, message: Message) -> Message:
        for i, m in enumerate(self._reader._messages):
            if m.id == message.id:
                self._reader._messages[i] = message
                return message
        raise LookupError(message.id)


@dataclass
class FakeOutboxWriter:
    _records: list[dict[str, Any]] = field(default_factory=list)
    _pending: list[OutboxRecord] = field(default_factory=list)
    _sent: list[int] = field(default_factory=list)
    _failed: list[tuple[int, datetime, str | None]] = field(default_factory=list)

    async def add(self, event_type: str, payload: dict[str, Any]) -> None:
        self._records.append({"event_type": event_type, "payload": payload})

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        batch, self._pending = self._pending[:batch_size], self._pending[batch_size:]
        return batch

    async def mark_sent(self, ids: list[int]) -> None:
        self._sent.extend(ids)

    async def mark_failed(
        self, record_id: int, next_retry_at: datetime, error: str | None = None,
    ) -> None:
        self._failed.append((record_id, next_retry_at, error))


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    outbox: FakeOutboxWriter = field(default_factory=FakeOutboxWriter)
    _committed: bool = False

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def add_users(self, *users: User) -> None:
        for u in users:
            self.users._users[u.id] = u

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        pass


@pytest.fixture
def uow(alice: User, bob: User) -> FakeUoW:
    uow = FakeUoW()
    uow.add_users(alice, bob)
    return uow


# client side


def chat_user(name: str) -> ChatUser:
    return ChatUser(id=uuid.uuid4(), email=f"{name.lower()}@example.com", full_name=name)


def chat_message(sender: ChatUser, receiver: ChatUser, text: str | None = "hello", **kw) -> ChatMessage:
    kw.setdefault("created_at", _BASE_TS)
    return ChatMessage(id=uuid.uuid4(), sender_id=sender.id, receiver_id=receiver.id, text=text, **kw)


class FakeChatApi:
    """Stands in for ChatApi; history responses can be held back per peer.

    ``gates`` hold back history per peer and ``send_gate`` holds back sends.
    """

    def __init__(self) -> None:
        self.history: dict[UUID, list[ChatMessage]] = {}
        self.gates: dict[UUID, asyncio.Event] = {}
        self.send_gate: asyncio.Event | None = None
        self.calls: list[tuple] = []
        self.fail_with: ChatApiError | None = None
        self.me: ChatUser | None = None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def get_users(self) -> list[ChatUser]:
        self.calls.append(("get_users",))
        self._maybe_fail()
        return []

    async def get_messages(self, peer_id: UUID, **_kw) -> list[ChatMessage]:
        self.calls.append(("get_messages", peer_id))
        gate = self.gates.get(peer_id)
        if gate is not None:
            await gate.wait()
        self._maybe_fail()
        return list(self.history.get(peer_id, []))

    async def send_message(self, peer_id: UUID, *, text=None, image=None, client_msg_id=None) -> ChatMessage:
        self.calls.append(("send_message", peer_id, text, image))
        if self.send_gate is not None:
            await self.send_gate.wait()
        self._maybe_fail()
        assert self.me is not None
        return ChatMessage(
            id=uuid.uuid4(), sender_id=self.me.id, receiver_id=peer_id,
            text=text, image=image, created_at=_BASE_TS + timedelta(minutes=5),
        )

    def _find(self, message_id: UUID) -> ChatMessage:
        for messages in self.history.values():
            for m in messages:
                if m.id == message_id:
                    return m
        raise ChatApiError(404, "Message not found")

    async def update_message(self, message_id: UUID, text: str) -> ChatMessage:
        self.calls.append(("update_message", message_id, text))
        self._maybe_fail()
        return self._find(message_id).model_copy(update={"text": text or None, "edited": True})

    async def delete_message(self, message_id: UUID) -> ChatMessage:
        self.calls.append(("delete_message", message_id))
        self._maybe_fail()
        return self._find(message_id).model_copy(update={"deleted": True})

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


