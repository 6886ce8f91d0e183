"""User application service: CRUD and role assignment for users."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from app.application.services._pagination import page_offset
from app.domain.exceptions import DuplicateResourceException, ResourceNotFoundException
from app.shared.context import AuditContext

_USER = "user"


class UserService:
    """Create, read, update and delete users; assign and remove their roles.

    Every write is issued through the repositories with the caller's
    AuditContext so it lands in the change history with the acting user.
    """

    def __init__(
        self,
        user_repo: Any,
        role_repo: Any,
        user_role_repo: Any,
    ) -> None:
        self._user_repo = user_repo
        self._role_repo = role_repo
        self._user_role_repo = user_role_repo

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        nickname: str | None,
        ctx: AuditContext,
    ) -> Any:
        """Create a user. Raises DuplicateResourceException if email or username is taken."""
        # Best-effort check; the unique constraints still back it (mapped to 409 in the repo).
        if await self._user_repo.get_by_email(email):
            raise DuplicateResourceException(_USER, "email", email)
        if await self._user_repo.get_by_username(username):
            raise DuplicateResourceException(_USER, "username", username)
        user = await self._user_repo.create_user(
            username=username,
            email=email,
            password=password,
            nickname=nickname,
            ctx=ctx,
        )
        return await self.get_user(user.id)

    async def get_user(self, user_id: int) -> Any:
        """Return user with roles and permissions. Raises ResourceNotFoundException."""
        user = await self._user_repo.get_with_roles(user_id)
        if user is None:
            raise ResourceNotFoundException(_USER, user_id)
        return user

    async def list_users(self, page: int, page_size: int) -> tuple[list[Any], int]:
        return await self._user_repo.list_with_roles(page_offset(page, page_size), page_size)

    async def update_user(
        self, user_id: int, changes: dict[str, Any], ctx: AuditContext
    ) -> Any:
        """Apply a partial update (email, nickname, password, status)."""
        user = await self._user_repo.get_or_404(user_id, _USER)
        email = changes.get("email")
        if email is not None and email != user.email:
            other = await self._user_repo.get_by_email(email)
            if other is not None and other.id != user.id:
                raise DuplicateResourceException(_USER, "email", email)
            user.email = email
        if "nickname" in changes:
            user.nickname = changes["nickname"]
        if changes.get("password"):
            await self._user_repo.set_password(user, changes["password"])
        if changes.get("status") is not None:
            user.status = int(changes["status"])
        await self._user_repo.update(user, ctx)
        return await self.get_user(user_id)

    async def delete_user(self, user_id: int, ctx: AuditContext) -> None:
        """Soft-delete a user. Raises ResourceNotFoundException if missing."""
        await self._user_repo.get_or_404(user_id, _USER)
        await self._user_repo.delete_by_id(user_id, ctx)

    async def get_roles(self, user_id: int) -> list[Any]:
        """Return the live roles assigned to a user."""
        user = await self.get_user(user_id)
        return list(user.roles)

    async def assign_roles(
        self, user_id: int, role_ids: Sequence[int], ctx: AuditContext
    ) -> list[Any]:
        """Assign roles; unknown ids are ignored and existing assignments skipped."""
        await self._user_repo.get_or_404(user_id, _USER)
        for role_id in await self._role_repo.get_existing_ids(role_ids):
            await self._user_role_repo.assign(user_id, role_id, ctx)
        return await self.get_roles(user_id)

    async def remove_roles(
        self, user_id: int, role_ids: Sequence[int], ctx: AuditContext
    ) -> list[Any]:
        """Remove role assignments; ids that are not assigned are ignored."""
        await self._user_repo.get_or_404(user_id, _USER)
        for role_id in sorted(set(role_ids)):
            await self._user_role_repo.unassign(user_id, role_id, ctx)
        return await self.get_roles(user_id)
