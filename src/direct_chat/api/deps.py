"""FastAPI dependency injection helpers."""
from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Annotated, AsyncIterator

import jwt
from fastapi import Depends, HTTPException, Request, status

from direct_chat.application.dto.principal import Principal
from direct_chat.application.exceptions import NotFoundError
from direct_chat.config import settings
from direct_chat.infrastructure.auth.jwt_tokens import JwtTokenService
from direct_chat.infrastructure.auth.passwords import BcryptHasher
from direct_chat.infrastructure.db.uow import SqlAlchemyUoW


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with SqlAlchemyUoW() as uow:
        yield uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


@lru_cache(maxsize=1)
def get_token_service() -> JwtTokenService:
    return JwtTokenService(
        settings.JWT_SECRET,
        settings.JWT_ALGORITHM,
        expires_in=timedelta(days=settings.JWT_EXPIRE_DAYS),
    )


@lru_cache(maxsize=1)
def get_password_hasher() -> BcryptHasher:
    return BcryptHasher(rounds=settings.BCRYPT_ROUNDS)


TokenServiceDep = Annotated[JwtTokenService, Depends(get_token_service)]
HasherDep = Annotated[BcryptHasher, Depends(get_password_hasher)]


async def authenticate_token(token: str | None, tokens: JwtTokenService) -> Principal:
    """Shared by HTTP routes and the WebSocket endpoint."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - No Token Provided",
        )
    try:
        return await tokens.verify(token)
    except (jwt.PyJWTError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid Token",
        ) from exc


async def protect_route(
    request: Request,
    tokens: TokenServiceDep,
    uow: UoWDep,
) -> Principal:
    """Reject the request unless it carries a valid session cookie for an existing user."""
    principal = await authenticate_token(request.cookies.get(settings.AUTH_COOKIE_NAME), tokens)
    if await uow.users.get_by_id(principal.user_id) is None:
        raise NotFoundError("User not found")
    return principal


CurrentPrincipal = Annotated[Principal, Depends(protect_route)]
