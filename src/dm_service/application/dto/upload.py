from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UploadDTO:
    """Raw file received from the caller, before it is stored."""

    data: bytes
    filename: str | None
    content_type: str | None


@dataclass(frozen=True, slots=True)
class StoredObject:
    stored_name: str
    path: str
    content_type: str | None
    size: int
