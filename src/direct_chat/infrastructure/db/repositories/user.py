from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from direct_chat.domain.entities.user import User
from direct_chat.infrastructure.db.mappers import user as mapper
from direct_chat.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        model = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(UserModel).where(UserModel.email == email))
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_except(self, user_id: UUID) -> list[User]:
        stmt = (
            select(UserModel)
            .where(UserModel.id != user_id)
            .order_by(UserModel.full_name.asc(), UserModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class UserWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, user: User) -> User:
        model = mapper.entity_to_model(user)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def set_profile_pic(self, user_id: UUID, profile_pic: str) -> User | None:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(profile_pic=profile_pic)
            .returning(UserModel)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None
