from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from dm_service.api.deps import CurrentPrincipal, UoWDep
from dm_service.api.v1.schemas.chat import ChatResponse, CreateChatRequest
from dm_service.api.v1.schemas.common import AckResponse, ErrorResponse, PageResponse
from dm_service.services import chat_service

router = APIRouter(
    prefix="/api/v1/chats",
    tags=["chats"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.post("", response_model=ChatResponse, status_code=201)
async def create_chat(
    body: CreateChatRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ChatResponse:
    chat = await chat_service.create_or_get_chat(principal, body.user_id, uow)
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.get("", response_model=PageResponse[ChatResponse])
async def list_chats(
    principal: CurrentPrincipal,
    uow: UoWDep,
    page: int = Query(1),
    page_size: int = Query(20),
) -> PageResponse[ChatResponse]:
    result = await chat_service.list_chats(principal, page, page_size, uow)
    return PageResponse[ChatResponse].model_validate(result, from_attributes=True)


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ChatResponse:
    chat = await chat_service.get_chat(chat_id, principal, uow)
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.delete("/{chat_id}", response_model=AckResponse)
async def delete_chat(
    chat_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> AckResponse:
    await chat_service.delete_chat(chat_id, principal, uow)
    return AckResponse(detail="Chat deleted")
