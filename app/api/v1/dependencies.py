"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the write-interceptor chain,
the request AuditContext and application services. Routes depend only on
these providers, never on infrastructure directly.

Read providers use get_db (no commit); *_for_write providers use
get_db_transactional (commit on success, rollback on error) and attach the
change-audit recorder built at startup (app.state.audit_recorder).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services import (
    AuditLogService,
    AuthService,
    PermissionService,
    RoleService,
    UserService,
)
from app.core.config import get_settings
from app.infrastructure.persistence.database import (
    ensure_engines,
    get_db,
    get_db_transactional,
)
from app.infrastructure.persistence.interceptors import WriteInterceptor
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
    UserRoleRepository,
)
from app.shared.context import AuditContext
from app.shared.request_audit import build_audit_context

ReadSession = Annotated[AsyncSession, Depends(get_db)]
WriteSession = Annotated[AsyncSession, Depends(get_db_transactional)]


def get_interceptors(request: Request) -> list[WriteInterceptor]:
    """Write interceptors for this app (the change-audit recorder when enabled)."""
    recorder = getattr(request.app.state, "audit_recorder", None)
    return [recorder] if recorder is not None else []


Interceptors = Annotated[list[WriteInterceptor], Depends(get_interceptors)]


def get_audit_context(request: Request) -> AuditContext:
    """Acting user (bearer token subject) and client address for this request."""
    return build_audit_context(request)


class Pagination:
    """page / page_size query parameters bounded by settings."""

    def __init__(
        self,
        page: Annotated[int, Query(ge=1)] = 1,
        page_size: Annotated[int | None, Query(ge=1)] = None,
    ) -> None:
        settings = get_settings()
        self.page = page
        self.page_size = min(page_size or settings.default_page_size, settings.max_page_size)


async def get_audit_db() -> AsyncIterator[AsyncSession]:
    """Session on the audit sink database (where audit_logs entries live)."""
    _, sink_factory = ensure_engines()
    async with sink_factory() as session:
        yield session


def _user_service(db: AsyncSession, interceptors: list[WriteInterceptor]) -> UserService:
    return UserService(
        user_repo=UserRepository(db, interceptors),
        role_repo=RoleRepository(db, interceptors),
        user_role_repo=UserRoleRepository(db, interceptors),
    )


def _role_service(db: AsyncSession, interceptors: list[WriteInterceptor]) -> RoleService:
    return RoleService(
        role_repo=RoleRepository(db, interceptors),
        permission_repo=PermissionRepository(db, interceptors),
        user_repo=UserRepository(db, interceptors),
        role_permission_repo=RolePermissionRepository(db, interceptors),
        user_role_repo=UserRoleRepository(db, interceptors),
    )


def get_user_service(db: ReadSession) -> UserService:
    return _user_service(db, [])


def get_user_service_for_write(db: WriteSession, interceptors: Interceptors) -> UserService:
    return _user_service(db, interceptors)


def get_role_service(db: ReadSession) -> RoleService:
    return _role_service(db, [])


def get_role_service_for_write(db: WriteSession, interceptors: Interceptors) -> RoleService:
    return _role_service(db, interceptors)


def get_permission_service(db: ReadSession) -> PermissionService:
    return PermissionService(PermissionRepository(db))


def get_permission_service_for_write(
    db: WriteSession, interceptors: Interceptors
) -> PermissionService:
    return PermissionService(PermissionRepository(db, interceptors))


def get_audit_log_service(
    db: Annotated[AsyncSession, Depends(get_audit_db)],
) -> AuditLogService:
    return AuditLogService(AuditLogRepository(db))


def get_auth_service(db: ReadSession) -> AuthService:
    return AuthService(UserRepository(db))
