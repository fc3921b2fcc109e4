from __future__ import annotations

from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from direct_chat.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from direct_chat.infrastructure.db.repositories.outbox import OutboxWriterRepo
from direct_chat.infrastructure.db.repositories.user import UserReaderRepo, UserWriterRepo
from direct_chat.infrastructure.db.session import AsyncSessionLocal


class SqlAlchemyUoW:
    """Unit of work over one session, opened on enter and closed on exit.

    Nothing is committed implicitly: services call ``commit()`` once their
    message and outbox writes are staged. Leaving the block with an
    exception, or without a commit, rolls the session back.
    """

    users: UserReaderRepo
    users_w: UserWriterRepo
    messages: MessageReaderRepo
    messages_w: MessageWriterRepo
    outbox: OutboxWriterRepo

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("SqlAlchemyUoW used outside 'async with'")
        return self._session

    async def __aenter__(self) -> Self:
        session = self._session_factory()
        self._session = session
        self.users = UserReaderRepo(session)
        self.users_w = UserWriterRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)
        self.outbox = OutboxWriterRepo(session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            if session.in_transaction():
                await session.rollback()
        finally:
            await session.close()

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
