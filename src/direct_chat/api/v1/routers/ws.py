from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect

from direct_chat.api.deps import authenticate_token, get_token_service
from direct_chat.application.dto.principal import Principal
from direct_chat.config import settings
from direct_chat.infrastructure.ws.manager import ConnectionManager
from direct_chat.infrastructure.ws.protocol import WsInbound, WsOutbound

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return manager


async def _authenticate(websocket: WebSocket) -> Principal | None:
    token = websocket.cookies.get(settings.AUTH_COOKIE_NAME)
    try:
        return await authenticate_token(token, get_token_service())
    except HTTPException as exc:
        logger.debug("WS auth failed: %s", exc.detail)
        return None


@router.websocket("/ws")
async def ws_chat(websocket: WebSocket) -> None:
    principal = await _authenticate(websocket)
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    key = principal.principal_key
    await manager.connect(websocket, key)

    heartbeat_task = asyncio.create_task(_heartbeat(websocket), name=f"ws-heartbeat-{key}")
    try:
        await _read_loop(websocket)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", key)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(websocket, key)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound.pong().model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


async def _read_loop(ws: WebSocket) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except ValueError:
            await ws.send_text(WsOutbound.error("invalid_payload").model_dump_json())
            continue

        if msg.type == "ping":
            await ws.send_text(WsOutbound.pong().model_dump_json())
        else:
            await ws.send_text(WsOutbound.error("unknown_type", type=msg.type).model_dump_json())
