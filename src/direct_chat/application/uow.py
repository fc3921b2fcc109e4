from __future__ import annotations

from typing import Protocol

from direct_chat.application.repositories.message import MessageReader, MessageWriter
from direct_chat.application.repositories.outbox import OutboxWriter
from direct_chat.application.repositories.user import UserReader, UserWriter


class UnitOfWork(Protocol):
    """Readers and writers sharing one transaction.

    A message mutation and its outbox record are staged through the same
    unit and become visible together on ``commit()``.
    """

    users: UserReader
    users_w: UserWriter
    messages: MessageReader
    messages_w: MessageWriter
    outbox: OutboxWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
