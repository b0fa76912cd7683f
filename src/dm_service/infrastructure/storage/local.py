"""Disk-backed attachment storage for chat uploads."""
from __future__ import annotations

import asyncio
import logging
import mimetypes
import secrets
import time
from pathlib import Path, PurePath

from dm_service.application.dto.upload import StoredObject, UploadDTO
from dm_service.application.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset({
    # images
    "image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml", "image/bmp",
    # video
    "video/mp4", "video/webm", "video/ogg", "video/quicktime", "video/3gpp",
    # audio
    "audio/mpeg", "audio/mp3", "audio/wav", "audio/ogg", "audio/aac", "audio/flac",
    "audio/webm", "audio/mp4",
    # documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "application/rtf",
    # archives
    "application/zip", "application/x-rar-compressed", "application/x-7z-compressed",
})


class LocalAttachmentStorage:
    """Implements application.ports.storage.AttachmentStorage on the local filesystem."""

    def __init__(
        self,
        root: Path,
        url_prefix: str,
        *,
        max_files: int = 5,
        max_bytes: int = 50 * 1024 * 1024,
    ) -> None:
        self._root = root
        self._url_prefix = url_prefix.rstrip("/")
        self._max_files = max_files
        self._max_bytes = max_bytes

    def validate(self, uploads: list[UploadDTO]) -> None:
        if len(uploads) > self._max_files:
            raise InvalidRequestError(f"At most {self._max_files} files per message")
        for upload in uploads:
            if upload.content_type not in ALLOWED_CONTENT_TYPES:
                raise InvalidRequestError(f"File type not allowed: {upload.content_type}")
            if len(upload.data) > self._max_bytes:
                name = upload.filename or "upload"
                raise InvalidRequestError(f"{name} exceeds the {self._max_bytes} byte limit")

    async def store(self, upload: UploadDTO) -> StoredObject:
        stored_name = self._stored_name(upload)
        target = self._root / stored_name
        await asyncio.to_thread(self._write, target, upload.data)
        logger.debug("Stored attachment %s (%d bytes)", stored_name, len(upload.data))
        return StoredObject(
            stored_name=stored_name,
            path=f"{self._url_prefix}/{stored_name}",
            content_type=upload.content_type,
            size=len(upload.data),
        )

    async def discard(self, stored_name: str) -> None:
        await asyncio.to_thread((self._root / PurePath(stored_name).name).unlink, missing_ok=True)
        logger.debug("Discarded attachment %s", stored_name)

    @staticmethod
    def _stored_name(upload: UploadDTO) -> str:
        suffix = PurePath(upload.filename).suffix.lower() if upload.filename else ""
        if not suffix and upload.content_type:
            suffix = mimetypes.guess_extension(upload.content_type) or ""
        return f"chat_{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
