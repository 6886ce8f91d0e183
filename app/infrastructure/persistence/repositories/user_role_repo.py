"""UserRole repository: user-role assignments.

Rows are hard-deleted on removal; every insert and delete goes through
BaseRepository so it reaches the write interceptors.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.permission import UserRole
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.context import AuditContext

if TYPE_CHECKING:
    from app.infrastructure.persistence.interceptors import WriteInterceptor


class UserRoleRepository(BaseRepository[UserRole]):
    """User-role link table only. Assign/remove and list links in both directions."""

    def __init__(
        self,
        db: AsyncSession,
        interceptors: Sequence[WriteInterceptor] = (),
    ) -> None:
        super().__init__(db, UserRole, interceptors)

    async def get_links(
        self, *, user_id: int | None = None, role_id: int | None = None
    ) -> list[UserRole]:
        q = select(UserRole)
        if user_id is not None:
            q = q.where(UserRole.user_id == user_id)
        if role_id is not None:
            q = q.where(UserRole.role_id == role_id)
        result = await self.db.execute(q.order_by(UserRole.id))
        return list(result.scalars().all())

    async def assign(
        self, user_id: int, role_id: int, ctx: AuditContext | None = None
    ) -> UserRole | None:
        """Create the link; None when it already exists."""
        if await self.get_links(user_id=user_id, role_id=role_id):
            return None
        return await self.create(UserRole(user_id=user_id, role_id=role_id), ctx)

    async def unassign(
        self, user_id: int, role_id: int, ctx: AuditContext | None = None
    ) -> bool:
        """Delete the link; False when it did not exist."""
        links = await self.get_links(user_id=user_id, role_id=role_id)
        for link in links:
            await self.delete(link, ctx)
        return bool(links)
