"""Permission repository."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import DuplicateResourceException
from app.infrastructure.persistence.models.permission import Permission
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.context import AuditContext

if TYPE_CHECKING:
    from app.infrastructure.persistence.interceptors import WriteInterceptor


class PermissionRepository(BaseRepository[Permission]):
    """Permission repository. Lookups by name and by resource/action."""

    def __init__(
        self,
        db: AsyncSession,
        interceptors: Sequence[WriteInterceptor] = (),
    ) -> None:
        super().__init__(db, Permission, interceptors)

    async def get_by_name(self, name: str) -> Permission | None:
        result = await self.db.execute(
            self._live(select(Permission).where(Permission.name == name))
        )
        return result.scalar_one_or_none()

    async def get_by_resource_action(self, resource: str, action: str) -> Permission | None:
        result = await self.db.execute(
            self._live(
                select(Permission).where(
                    Permission.resource == resource,
                    Permission.action == action,
                )
            )
            .order_by(Permission.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_existing_ids(self, permission_ids: Sequence[int]) -> list[int]:
        """Return the subset of permission_ids that are live permissions, in ascending order."""
        if not permission_ids:
            return []
        result = await self.db.execute(
            self._live(
                select(Permission.id).where(Permission.id.in_(set(permission_ids)))
            ).order_by(Permission.id)
        )
        return list(result.scalars().all())

    async def create_permission(
        self,
        name: str,
        resource: str,
        action: str,
        display_name: str = "",
        description: str = "",
        ctx: AuditContext | None = None,
    ) -> Permission:
        """Create a permission; raise DuplicateResourceException when the name is taken."""
        permission = Permission(
            name=name,
            display_name=display_name,
            description=description,
            resource=resource,
            action=action,
        )
        try:
            return await self.create(permission, ctx)
        except IntegrityError:
            raise DuplicateResourceException("permission", "name", name) from None
