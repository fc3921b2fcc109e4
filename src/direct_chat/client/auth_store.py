from __future__ import annotations

import logging

from direct_chat.client.api import ChatApi
from direct_chat.client.errors import ChatApiError
from direct_chat.client.models import ChatUser

logger = logging.getLogger(__name__)


class AuthStore:
    """Holds the authenticated user of this client session."""

    def __init__(self, api: ChatApi) -> None:
        self._api = api
        self.auth_user: ChatUser | None = None
        self.is_checking_auth = False

    async def check_auth(self) -> ChatUser | None:
        self.is_checking_auth = True
        try:
            self.auth_user = await self._api.check_auth()
        except ChatApiError as exc:
            if exc.status_code not in (401, 404):
                logger.warning("Auth check failed: %s", exc)
            self.auth_user = None
        finally:
            self.is_checking_auth = False
        return self.auth_user

    async def signup(self, full_name: str, email: str, password: str) -> ChatUser:
        self.auth_user = await self._api.signup(full_name, email, password)
        return self.auth_user

    async def login(self, email: str, password: str) -> ChatUser:
        self.auth_user = await self._api.login(email, password)
        return self.auth_user

    async def logout(self) -> None:
        await self._api.logout()
        self.auth_user = None

    async def update_profile(self, profile_pic: str) -> ChatUser:
        self.auth_user = await self._api.update_profile(profile_pic)
        return self.auth_user
