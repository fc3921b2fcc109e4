from __future__ import annotations

import uuid

import httpx
import pytest

from direct_chat.client.api import ChatApi
from direct_chat.client.errors import ChatApiError


def _api(handler) -> ChatApi:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://chat.test")
    return ChatApi(client)


@pytest.mark.asyncio
async def test_non_json_success_body_raises_api_error():
    api = _api(lambda request: httpx.Response(200, text="<html>proxy</html>"))

    with pytest.raises(ChatApiError) as exc_info:
        await api.get_messages(uuid.uuid4())

    assert exc_info.value.status_code == 200
    assert exc_info.value.detail == "invalid JSON"
    await api.aclose()


@pytest.mark.asyncio
async def test_error_detail_taken_from_json_body():
    api = _api(lambda request: httpx.Response(403, json={"detail": "Only the sender can modify this message"}))

    with pytest.raises(ChatApiError) as exc_info:
        await api.delete_message(uuid.uuid4())

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Only the sender can modify this message"
    await api.aclose()


@pytest.mark.asyncio
async def test_transport_failure_has_no_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = _api(handler)

    with pytest.raises(ChatApiError) as exc_info:
        await api.get_users()

    assert exc_info.value.status_code is None
    await api.aclose()
