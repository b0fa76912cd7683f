from __future__ import annotations

from typing import Protocol

from dm_service.application.dto.upload import StoredObject, UploadDTO


class AttachmentStorage(Protocol):
    def validate(self, uploads: list[UploadDTO]) -> None:
        """Raise InvalidRequestError if the batch breaks count/size/type limits."""
        ...

    async def store(self, upload: UploadDTO) -> StoredObject: ...

    async def discard(self, stored_name: str) -> None:
        """Remove a stored object. Missing objects are ignored."""
        ...
