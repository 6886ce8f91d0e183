"""Role application service: CRUD plus permission and user assignment for roles."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from app.application.services._pagination import page_offset
from app.domain.exceptions import DuplicateResourceException, ResourceNotFoundException
from app.shared.context import AuditContext

_ROLE = "role"


class RoleService:
    """Manage roles and their permission and user assignments."""

    def __init__(
        self,
        role_repo: Any,
        permission_repo: Any,
        user_repo: Any,
        role_permission_repo: Any,
        user_role_repo: Any,
    ) -> None:
        self._role_repo = role_repo
        self._permission_repo = permission_repo
        self._user_repo = user_repo
        self._role_permission_repo = role_permission_repo
        self._user_role_repo = user_role_repo

    async def create_role(
        self,
        name: str,
        display_name: str,
        description: str,
        ctx: AuditContext,
    ) -> Any:
        """Create a role. Raises DuplicateResourceException if the name is taken."""
        if await self._role_repo.get_by_name(name):
            raise DuplicateResourceException(_ROLE, "name", name)
        role = await self._role_repo.create_role(
            name=name,
            display_name=display_name,
            description=description,
            ctx=ctx,
        )
        return await self.get_role(role.id)

    async def get_role(self, role_id: int) -> Any:
        """Return role with permissions. Raises ResourceNotFoundException."""
        role = await self._role_repo.get_with_permissions(role_id)
        if role is None:
            raise ResourceNotFoundException(_ROLE, role_id)
        return role

    async def list_roles(self, page: int, page_size: int) -> tuple[list[Any], int]:
        return await self._role_repo.list_with_permissions(
            page_offset(page, page_size), page_size
        )

    async def update_role(
        self, role_id: int, changes: dict[str, Any], ctx: AuditContext
    ) -> Any:
        """Apply a partial update (display_name, description, status)."""
        role = await self._role_repo.get_or_404(role_id, _ROLE)
        for field in ("display_name", "description"):
            if changes.get(field) is not None:
                setattr(role, field, changes[field])
        if changes.get("status") is not None:
            role.status = int(changes["status"])
        await self._role_repo.update(role, ctx)
        return await self.get_role(role_id)

    async def delete_role(self, role_id: int, ctx: AuditContext) -> None:
        """Soft-delete a role. Raises ResourceNotFoundException if missing."""
        await self._role_repo.get_or_404(role_id, _ROLE)
        await self._role_repo.delete_by_id(role_id, ctx)

    async def get_permissions(self, role_id: int) -> list[Any]:
        role = await self.get_role(role_id)
        return list(role.permissions)

    async def assign_permissions(
        self, role_id: int, permission_ids: Sequence[int], ctx: AuditContext
    ) -> list[Any]:
        """Assign permissions; unknown ids are ignored and existing assignments skipped."""
        await self._role_repo.get_or_404(role_id, _ROLE)
        for permission_id in await self._permission_repo.get_existing_ids(permission_ids):
            await self._role_permission_repo.assign(role_id, permission_id, ctx)
        return await self.get_permissions(role_id)

    async def remove_permissions(
        self, role_id: int, permission_ids: Sequence[int], ctx: AuditContext
    ) -> list[Any]:
        await self._role_repo.get_or_404(role_id, _ROLE)
        for permission_id in sorted(set(permission_ids)):
            await self._role_permission_repo.unassign(role_id, permission_id, ctx)
        return await self.get_permissions(role_id)

    async def get_users(self, role_id: int) -> list[Any]:
        """Return the live users holding a role."""
        role = await self._role_repo.get_with_users(role_id)
        if role is None:
            raise ResourceNotFoundException(_ROLE, role_id)
        return list(role.users)

    async def assign_users(
        self, role_id: int, user_ids: Sequence[int], ctx: AuditContext
    ) -> list[Any]:
        """Assign the role to users; unknown ids are ignored and existing assignments skipped."""
        await self._role_repo.get_or_404(role_id, _ROLE)
        for user_id in await self._user_repo.get_existing_ids(user_ids):
            await self._user_role_repo.assign(user_id, role_id, ctx)
        return await self.get_users(role_id)

    async def remove_users(
        self, role_id: int, user_ids: Sequence[int], ctx: AuditContext
    ) -> list[Any]:
        await self._role_repo.get_or_404(role_id, _ROLE)
        for user_id in sorted(set(user_ids)):
            await self._user_role_repo.unassign(user_id, role_id, ctx)
        return await self.get_users(role_id)
