from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PageInfoResponse(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int

    model_config = {"from_attributes": True}


class PageResponse(BaseModel, Generic[T]):
    items: list[T]  # type: ignore[type-var]
    page_info: PageInfoResponse

    model_config = {"from_attributes": True}


class AckResponse(BaseModel):
    detail: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
