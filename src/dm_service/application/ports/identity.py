from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from dm_service.application.dto.principal import Principal
from dm_service.domain.entities.user import UserProjection


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Principal: ...


class UserDirectory(Protocol):
    async def filter_active(self, user_ids: Iterable[int]) -> set[int]:
        """Return the subset of ids that exist and are active."""
        ...

    async def project(self, user_ids: Iterable[int]) -> dict[int, UserProjection]:
        """Display projections for the ids that exist. Missing ids are omitted."""
        ...
