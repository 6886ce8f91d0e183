"""Application layer: services orchestrating repositories.

Depends on domain exceptions and the repository methods it is given; the
composition root (app.api.v1.dependencies) supplies concrete repositories.
"""

from app.application.services import (
    AuditLogService,
    AuthService,
    PermissionService,
    RoleService,
    UserService,
)

__all__ = [
    "AuditLogService",
    "AuthService",
    "PermissionService",
    "RoleService",
    "UserService",
]
