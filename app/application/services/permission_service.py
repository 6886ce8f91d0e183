"""Permission application service: CRUD with duplicate check and resource/action lookup."""

from __future__ import annotations

from typing import Any

from app.application.services._pagination import page_offset
from app.domain.exceptions import DuplicateResourceException, ResourceNotFoundException
from app.shared.context import AuditContext

_PERMISSION = "permission"


class PermissionService:
    """Create, read, update and delete permissions."""

    def __init__(self, permission_repo: Any) -> None:
        self._repo = permission_repo

    async def create_permission(
        self,
        name: str,
        display_name: str,
        description: str,
        resource: str,
        action: str,
        ctx: AuditContext,
    ) -> Any:
        """Create permission. Raises DuplicateResourceException if the name exists."""
        # Best-effort check; the unique constraint backs it up (mapped to 409 in the repo).
        if await self._repo.get_by_name(name):
            raise DuplicateResourceException(_PERMISSION, "name", name)
        return await self._repo.create_permission(
            name=name,
            resource=resource,
            action=action,
            display_name=display_name,
            description=description,
            ctx=ctx,
        )

    async def get_permission(self, permission_id: int) -> Any:
        return await self._repo.get_or_404(permission_id, _PERMISSION)

    async def list_permissions(self, page: int, page_size: int) -> tuple[list[Any], int]:
        return await self._repo.get_page(page_offset(page, page_size), page_size)

    async def find_by_resource_action(self, resource: str, action: str) -> Any:
        """Return the permission for resource/action. Raises ResourceNotFoundException."""
        permission = await self._repo.get_by_resource_action(resource, action)
        if permission is None:
            raise ResourceNotFoundException(_PERMISSION, f"{resource}:{action}")
        return permission

    async def update_permission(
        self, permission_id: int, changes: dict[str, Any], ctx: AuditContext
    ) -> Any:
        """Apply a partial update (display_name, description, status)."""
        permission = await self._repo.get_or_404(permission_id, _PERMISSION)
        for field in ("display_name", "description"):
            if changes.get(field) is not None:
                setattr(permission, field, changes[field])
        if changes.get("status") is not None:
            permission.status = int(changes["status"])
        return await self._repo.update(permission, ctx)

    async def delete_permission(self, permission_id: int, ctx: AuditContext) -> None:
        await self._repo.get_or_404(permission_id, _PERMISSION)
        await self._repo.delete_by_id(permission_id, ctx)
