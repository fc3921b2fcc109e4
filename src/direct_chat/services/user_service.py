from __future__ import annotations

from direct_chat.application.dto.principal import Principal
from direct_chat.application.uow import UnitOfWork
from direct_chat.domain.entities.user import User


async def list_sidebar_users(principal: Principal, uow: UnitOfWork) -> list[User]:
    return await uow.users.list_except(principal.user_id)
