"""Application services (use-case orchestration over repositories)."""

from app.application.services.audit_log_service import AuditLogService
from app.application.services.auth_service import AuthService
from app.application.services.permission_service import PermissionService
from app.application.services.role_service import RoleService
from app.application.services.user_service import UserService

__all__ = [
    "AuditLogService",
    "AuthService",
    "PermissionService",
    "RoleService",
    "UserService",
]
