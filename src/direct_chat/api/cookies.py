"""Session cookie: httpOnly, SameSite=strict, Secure in production, 7 days by default."""
from __future__ import annotations

from fastapi import Response

from direct_chat.config import settings


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_auth_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value="",
        max_age=0,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
