from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserProjection:
    """Public view of a user as supplied by the directory."""

    id: int
    display_name: str
    handle: str | None = None
    avatar_url: str | None = None

    @classmethod
    def unknown(cls, user_id: int) -> UserProjection:
        return cls(id=user_id, display_name="Unknown user")
