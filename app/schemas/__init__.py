"""Pydantic request/response schemas for the API."""

from app.schemas.audit_log import AuditLogEntryResponse
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.common import Page, PermissionIdsRequest, RoleIdsRequest, UserIdsRequest
from app.schemas.health import HealthResponse
from app.schemas.permission import PermissionCreate, PermissionResponse, PermissionUpdate
from app.schemas.role import RoleCreateRequest, RoleResponse, RoleSummary, RoleUpdate
from app.schemas.user import (
    UserCreateRequest,
    UserDetailResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)

__all__ = [
    "AuditLogEntryResponse",
    "HealthResponse",
    "LoginRequest",
    "Page",
    "PermissionCreate",
    "PermissionIdsRequest",
    "PermissionResponse",
    "PermissionUpdate",
    "RoleCreateRequest",
    "RoleIdsRequest",
    "RoleResponse",
    "RoleSummary",
    "RoleUpdate",
    "TokenResponse",
    "UserCreateRequest",
    "UserDetailResponse",
    "UserIdsRequest",
    "UserResponse",
    "UserSummary",
    "UserUpdate",
]
