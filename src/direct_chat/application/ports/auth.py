from __future__ import annotations

from typing import Protocol
from uuid import UUID

from direct_chat.application.dto.principal import Principal


class TokenIssuer(Protocol):
    def issue(self, user_id: UUID) -> str: ...


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Principal: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str) -> bool: ...
