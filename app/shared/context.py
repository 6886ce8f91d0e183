"""Request-scoped audit context.

The HTTP layer builds one AuditContext per request (acting user id and
client address) and passes it explicitly through service and repository
calls down to the write interceptors. Nothing here is global: code that has
no request (scripts, tests) passes SYSTEM_CONTEXT.

Usage:
    ctx = AuditContext(user_id=7, ip_address="10.0.0.5")
    await role_service.delete_role(role_id, ctx)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuditContext:
    """Who performed a write and from where.

    Attributes:
        user_id: Acting user id; 0 when the request is anonymous.
        ip_address: Client network address; empty when unknown.
    """

    user_id: int = 0
    ip_address: str = ""


SYSTEM_CONTEXT = AuditContext()
