from __future__ import annotations

from pydantic import BaseModel


class UserProjectionResponse(BaseModel):
    id: int
    display_name: str
    handle: str | None
    avatar_url: str | None

    model_config = {"from_attributes": True}
