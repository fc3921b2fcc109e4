"""Async HTTP client for the chat API. The session cookie lives in the httpx cookie jar."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import httpx

from direct_chat.client.errors import ChatApiError
from direct_chat.client.models import ChatMessage, ChatUser

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


class ChatApi:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def connect(cls, base_url: str, *, timeout: float = DEFAULT_TIMEOUT) -> ChatApi:
        return cls(httpx.AsyncClient(base_url=base_url, timeout=timeout))

    async def aclose(self) -> None:
        await self._client.aclose()

    def session_token(self, cookie_name: str = "jwt") -> str | None:
        """The session cookie set by signup/login, for opening the live feed."""
        return self._client.cookies.get(cookie_name)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise ChatApiError(None, str(exc)) from exc
        if response.is_error:
            raise ChatApiError(response.status_code, _error_detail(response))
        try:
            return response.json()
        except ValueError as exc:
            logger.debug("%s %s returned a non-JSON body", method, url)
            raise ChatApiError(response.status_code, "invalid JSON") from exc

    # auth

    async def signup(self, full_name: str, email: str, password: str) -> ChatUser:
        data = await self._request(
            "POST",
            "/api/auth/signup",
            json={"full_name": full_name, "email": email, "password": password},
        )
        return ChatUser.model_validate(data)

    async def login(self, email: str, password: str) -> ChatUser:
        data = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password},
        )
        return ChatUser.model_validate(data)

    async def logout(self) -> None:
        await self._request("POST", "/api/auth/logout")

    async def check_auth(self) -> ChatUser:
        return ChatUser.model_validate(await self._request("GET", "/api/auth/check"))

    async def update_profile(self, profile_pic: str) -> ChatUser:
        data = await self._request(
            "PUT", "/api/auth/update-profile", json={"profile_pic": profile_pic},
        )
        return ChatUser.model_validate(data)

    # messages

    async def get_users(self) -> list[ChatUser]:
        data = await self._request("GET", "/api/messages/users")
        return [ChatUser.model_validate(u) for u in data]

    async def get_messages(
        self,
        peer_id: UUID,
        *,
        before: str | None = None,
        limit: int | None = None,
    ) -> list[ChatMessage]:
        params: dict[str, Any] = {}
        if before:
            params["before"] = before
        if limit:
            params["limit"] = limit
        data = await self._request("GET", f"/api/messages/{peer_id}", params=params)
        return [ChatMessage.model_validate(m) for m in data]

    async def send_message(
        self,
        peer_id: UUID,
        *,
        text: str | None = None,
        image: str | None = None,
        client_msg_id: UUID | None = None,
    ) -> ChatMessage:
        body: dict[str, Any] = {"text": text, "image": image}
        if client_msg_id is not None:
            body["client_msg_id"] = str(client_msg_id)
        data = await self._request("POST", f"/api/messages/send/{peer_id}", json=body)
        return ChatMessage.model_validate(data)

    async def update_message(self, message_id: UUID, text: str) -> ChatMessage:
        data = await self._request(
            "PATCH", f"/api/messages/update/{message_id}", json={"text": text},
        )
        return ChatMessage.model_validate(data)

    async def delete_message(self, message_id: UUID) -> ChatMessage:
        data = await self._request("DELETE", f"/api/messages/delete/{message_id}")
        return ChatMessage.model_validate(data)
