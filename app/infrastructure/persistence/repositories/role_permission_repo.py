"""RolePermission repository: role-permission assignments.

Rows are hard-deleted on removal; every insert and delete goes through
BaseRepository so it reaches the write interceptors.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.permission import RolePermission
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.context import AuditContext

if TYPE_CHECKING:
    from app.infrastructure.persistence.interceptors import WriteInterceptor


class RolePermissionRepository(BaseRepository[RolePermission]):
    """Role-permission link table only. Assign/remove and list links in both directions."""

    def __init__(
        self,
        db: AsyncSession,
        interceptors: Sequence[WriteInterceptor] = (),
    ) -> None:
        super().__init__(db, RolePermission, interceptors)

    async def get_links(
        self, *, role_id: int | None = None, permission_id: int | None = None
    ) -> list[RolePermission]:
        q = select(RolePermission)
        if role_id is not None:
            q = q.where(RolePermission.role_id == role_id)
        if permission_id is not None:
            q = q.where(RolePermission.permission_id == permission_id)
        result = await self.db.execute(q.order_by(RolePermission.id))
        return list(result.scalars().all())

    async def assign(
        self, role_id: int, permission_id: int, ctx: AuditContext | None = None
    ) -> RolePermission | None:
        """Create the link; None when it already exists."""
        if await self.get_links(role_id=role_id, permission_id=permission_id):
            return None
        return await self.create(RolePermission(role_id=role_id, permission_id=permission_id), ctx)

    async def unassign(
        self, role_id: int, permission_id: int, ctx: AuditContext | None = None
    ) -> bool:
        """Delete the link; False when it did not exist."""
        links = await self.get_links(role_id=role_id, permission_id=permission_id)
        for link in links:
            await self.delete(link, ctx)
        return bool(links)
