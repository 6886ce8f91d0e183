"""User repository with password helpers and eager role loading."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domain.exceptions import DuplicateResourceException
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.security.password import hash_password, verify_password
from app.shared.context import AuditContext
from app.shared.enums import RecordStatus

if TYPE_CHECKING:
    from app.infrastructure.persistence.interceptors import WriteInterceptor

# Lazy dummy hash for constant-time comparison when user is not found (timing-attack mitigation).
# Computed on first use in a thread to avoid blocking the event loop at import.
_dummy_hash_cache: str | None = None


async def _get_dummy_hash() -> str:
    """Return a valid bcrypt hash for dummy comparison; computed once in thread pool."""
    global _dummy_hash_cache
    if _dummy_hash_cache is None:
        _dummy_hash_cache = await asyncio.to_thread(
            hash_password, "not-a-real-password"
        )
    return _dummy_hash_cache


class UserRepository(BaseRepository[User]):
    """User repository. authenticate, create_user, lookups by email/username."""

    def __init__(
        self,
        db: AsyncSession,
        interceptors: Sequence[WriteInterceptor] = (),
    ) -> None:
        super().__init__(db, User, interceptors)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            self._live(select(User).where(User.email == email))
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(
            self._live(select(User).where(User.username == username))
        )
        return result.scalar_one_or_none()

    async def get_with_roles(self, user_id: int) -> User | None:
        """Return a live user with roles and each role's permissions loaded."""
        result = await self.db.execute(
            self._live(select(User).where(User.id == user_id))
            .options(selectinload(User.roles).selectinload(Role.permissions))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_with_roles(self, skip: int = 0, limit: int = 100) -> tuple[list[User], int]:
        return await self.get_page(skip, limit, options=[selectinload(User.roles)])

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the enabled user matching email and password, else None."""
        user = await self.get_by_email(email)
        if not user:
            dummy_hash = await _get_dummy_hash()
            await asyncio.to_thread(verify_password, password, dummy_hash)
            return None
        if user.status != RecordStatus.ENABLED:
            return None
        if not await asyncio.to_thread(verify_password, password, user.password):
            return None
        return user

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        nickname: str | None = None,
        ctx: AuditContext | None = None,
    ) -> User:
        """Create user; raise DuplicateResourceException on unique constraint violation."""
        hashed = await asyncio.to_thread(hash_password, password)
        user = User(
            username=username,
            email=email,
            password=hashed,
            nickname=nickname,
            status=int(RecordStatus.ENABLED),
        )
        try:
            return await self.create(user, ctx)
        except IntegrityError:
            raise DuplicateResourceException("user", "email", email) from None

    async def update(self, obj: User, ctx: AuditContext | None = None) -> User:
        """Update user; raise DuplicateResourceException on unique constraint (e.g. duplicate email)."""
        try:
            return await super().update(obj, ctx)
        except IntegrityError:
            raise DuplicateResourceException("user", "email", obj.email) from None

    async def set_password(self, user: User, new_password: str) -> None:
        """Hash and assign a new password (flushed by the next update)."""
        user.password = await asyncio.to_thread(hash_password, new_password)

    async def get_existing_ids(self, user_ids: Sequence[int]) -> list[int]:
        """Return the subset of user_ids that are live users, in ascending order."""
        if not user_ids:
            return []
        result = await self.db.execute(
            self._live(select(User.id).where(User.id.in_(set(user_ids)))).order_by(User.id)
        )
        return list(result.scalars().all())
