from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from direct_chat.api.deps import CurrentPrincipal, UoWDep
from direct_chat.api.v1.schemas.message import (
    MessageResponse,
    SendMessageRequest,
    UpdateMessageRequest,
)
from direct_chat.api.v1.schemas.user import UserResponse
from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.config import settings
from direct_chat.infrastructure.db.repositories._cursor import encode_cursor
from direct_chat.services import message_service, user_service

router = APIRouter(prefix="/api/messages", tags=["messages"])

BEFORE_CURSOR_HEADER = "X-Before-Cursor"


@router.get("/users", response_model=list[UserResponse])
async def list_sidebar_users(principal: CurrentPrincipal, uow: UoWDep) -> list[UserResponse]:
    users = await user_service.list_sidebar_users(principal, uow)
    return [UserResponse.model_validate(u, from_attributes=True) for u in users]


@router.get("/{peer_id}", response_model=list[MessageResponse])
async def get_messages(
    peer_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    response: Response,
    before: str | None = Query(None),
    limit: int = Query(settings.MESSAGE_PAGE_LIMIT, ge=1, le=500),
) -> list[MessageResponse]:
    messages = await message_service.list_messages(principal, peer_id, before, limit, uow)
    if len(messages) == limit:
        oldest = messages[0]
        response.headers[BEFORE_CURSOR_HEADER] = encode_cursor(oldest.created_at, oldest.id)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.post(
    "/send/{peer_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    peer_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg, _created = await message_service.send_message(
        principal,
        SendMessageDTO(
            receiver_id=peer_id,
            text=body.text,
            image=body.image,
            client_msg_id=body.client_msg_id,
        ),
        uow,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.patch("/update/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: UUID,
    body: UpdateMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.update_message(principal, message_id, body.text, uow)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.delete("/delete/{message_id}", response_model=MessageResponse)
async def delete_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.delete_message(principal, message_id, uow)
    return MessageResponse.model_validate(msg, from_attributes=True)
