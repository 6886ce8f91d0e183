"""Role repository."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domain.exceptions import DuplicateResourceException
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.context import AuditContext

if TYPE_CHECKING:
    from app.infrastructure.persistence.interceptors import WriteInterceptor


class RoleRepository(BaseRepository[Role]):
    """Role repository. Lookups by name and eager loading of permissions."""

    def __init__(
        self,
        db: AsyncSession,
        interceptors: Sequence[WriteInterceptor] = (),
    ) -> None:
        super().__init__(db, Role, interceptors)

    async def get_by_name(self, name: str) -> Role | None:
        result = await self.db.execute(
            self._live(select(Role).where(Role.name == name))
        )
        return result.scalar_one_or_none()

    async def get_with_permissions(self, role_id: int) -> Role | None:
        """Return a live role with its permissions loaded."""
        result = await self.db.execute(
            self._live(select(Role).where(Role.id == role_id))
            .options(selectinload(Role.permissions))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_with_users(self, role_id: int) -> Role | None:
        """Return a live role with its (live) users loaded."""
        result = await self.db.execute(
            self._live(select(Role).where(Role.id == role_id))
            .options(selectinload(Role.users))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_with_permissions(
        self, skip: int = 0, limit: int = 100
    ) -> tuple[list[Role], int]:
        return await self.get_page(skip, limit, options=[selectinload(Role.permissions)])

    async def get_existing_ids(self, role_ids: Sequence[int]) -> list[int]:
        """Return the subset of role_ids that are live roles, in ascending order."""
        if not role_ids:
            return []
        result = await self.db.execute(
            self._live(select(Role.id).where(Role.id.in_(set(role_ids)))).order_by(Role.id)
        )
        return list(result.scalars().all())

    async def create_role(
        self,
        name: str,
        display_name: str = "",
        description: str = "",
        ctx: AuditContext | None = None,
    ) -> Role:
        """Create a role; raise DuplicateResourceException when the name is taken."""
        role = Role(name=name, display_name=display_name, description=description)
        try:
            return await self.create(role, ctx)
        except IntegrityError:
            raise DuplicateResourceException("role", "name", name) from None
