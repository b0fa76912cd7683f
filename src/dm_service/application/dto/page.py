from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

MAX_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class PageRequest:
    page: int
    page_size: int

    @classmethod
    def clamp(cls, page: int, page_size: int) -> PageRequest:
        return cls(page=max(page, 1), page_size=min(max(page_size, 1), MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True, slots=True)
class PageInfo:
    page: int
    page_size: int
    total_items: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    page_info: PageInfo

    @classmethod
    def build(cls, items: list[T], request: PageRequest, total: int) -> Page[T]:
        return cls(
            items=items,
            page_info=PageInfo(
                page=request.page,
                page_size=request.page_size,
                total_items=total,
                total_pages=math.ceil(total / request.page_size),
            ),
        )
