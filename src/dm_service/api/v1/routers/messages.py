from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, File, Query, UploadFile

from dm_service.api.deps import CurrentPrincipal, NotificationsDep, StorageDep, UoWDep
from dm_service.api.v1.schemas.common import AckResponse, ErrorResponse, PageResponse
from dm_service.api.v1.schemas.message import (
    AttachmentResponse,
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
)
from dm_service.application.dto.upload import UploadDTO
from dm_service.application.exceptions import InvalidRequestError
from dm_service.config import settings
from dm_service.services import message_service

router = APIRouter(
    prefix="/api/v1/chats",
    tags=["messages"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.get("/{chat_id}/messages", response_model=PageResponse[MessageResponse])
async def list_messages(
    chat_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    page: int = Query(1),
    page_size: int = Query(50),
) -> PageResponse[MessageResponse]:
    result = await message_service.list_messages(chat_id, principal, page, page_size, uow)
    return PageResponse[MessageResponse].model_validate(result, from_attributes=True)


@router.post("/{chat_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    chat_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    notifications: NotificationsDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        chat_id,
        principal,
        body.content,
        body.temporary,
        body.expires_at,
        uow,
        notifications,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post(
    "/{chat_id}/messages/{message_id}/attachments",
    response_model=list[AttachmentResponse],
)
async def attach_files(
    chat_id: UUID,
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    storage: StorageDep,
    files: list[UploadFile] = File(default=[]),
) -> list[AttachmentResponse]:
    _check_declared_limits(files)
    uploads = [
        UploadDTO(data=await f.read(), filename=f.filename, content_type=f.content_type)
        for f in files
    ]
    attachments = await message_service.attach_files(
        chat_id, message_id, principal, uploads, uow, storage,
    )
    return [AttachmentResponse.model_validate(a, from_attributes=True) for a in attachments]


@router.patch("/{chat_id}/messages/read", response_model=MarkReadResponse)
async def mark_read(
    chat_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    updated = await message_service.mark_read(chat_id, principal, uow)
    return MarkReadResponse(detail="Messages marked as read", updated=updated)


@router.delete("/messages/{message_id}", response_model=AckResponse)
async def delete_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> AckResponse:
    await message_service.delete_message(message_id, principal, uow)
    return AckResponse(detail="Message deleted")


def _check_declared_limits(files: list[UploadFile]) -> None:
    """Reject oversized batches before any file body is read into memory."""
    if len(files) > settings.UPLOAD_MAX_FILES:
        raise InvalidRequestError(f"At most {settings.UPLOAD_MAX_FILES} files per message")
    for f in files:
        if f.size is not None and f.size > settings.UPLOAD_MAX_BYTES:
            name = f.filename or "upload"
            raise InvalidRequestError(f"{name} exceeds the {settings.UPLOAD_MAX_BYTES} byte limit")
