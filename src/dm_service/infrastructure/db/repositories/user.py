from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.domain.entities.user import UserProjection
from dm_service.infrastructure.db.errors import translate_db_errors
from dm_service.infrastructure.db.models.user import UserModel


class UserDirectoryRepo:
    """Implements application.ports.identity.UserDirectory over the users mirror."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_db_errors
    async def filter_active(self, user_ids: Iterable[int]) -> set[int]:
        ids = set(user_ids)
        if not ids:
            return set()
        stmt = select(UserModel.id).where(UserModel.id.in_(ids), UserModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    @translate_db_errors
    async def project(self, user_ids: Iterable[int]) -> dict[int, UserProjection]:
        ids = set(user_ids)
        if not ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(ids))
        result = await self._session.execute(stmt)
        return {
            u.id: UserProjection(
                id=u.id,
                display_name=u.full_name,
                handle=u.username,
                avatar_url=u.avatar_url,
            )
            for u in result.scalars().all()
        }
